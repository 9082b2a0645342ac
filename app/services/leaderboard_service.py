"""
LeaderboardService - Calculates leaderboards in real-time from approved cards.

Nothing is pre-computed: every read aggregates the current approved-card set.
The aggregation itself (`aggregate`) is a pure function; the service only
fetches cards and competitor details around it.

Ranking:
1. average_score (descending)
2. total_x_count (descending)
3. earliest first card submitted_at (ascending)
4. competitor_id, only when the previous keys are all equal
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.competitor import Competitor
from app.models.leaderboard import LeaderboardEntry, LeaderboardFilter, TimeFrame
from app.models.score_card import ScoreCard
from app.repositories.competitor_repository import CompetitorRepository
from app.repositories.score_card_repository import ScoreCardRepository


class LeaderboardServiceError(Exception):
    """Base exception for leaderboard service errors."""
    pass


class LeaderboardNotFoundError(LeaderboardServiceError):
    """Raised when leaderboard data is not found."""
    pass


def time_frame_start(time_frame: TimeFrame, now: datetime) -> Optional[datetime]:
    """Lower bound on submitted_at for a time frame (None = all time)."""
    if time_frame == "all_time":
        return None
    if time_frame == "this_year":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    if time_frame == "this_month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if time_frame == "last_30_days":
        return now - timedelta(days=30)
    raise ValueError(f"Unknown time frame: {time_frame}")


def filter_cards(
    cards: list[ScoreCard],
    leaderboard_filter: LeaderboardFilter,
    now: datetime
) -> list[ScoreCard]:
    """Approved cards matching every field set on the filter."""
    since = time_frame_start(leaderboard_filter.time_frame, now)

    selected = []
    for card in cards:
        if card.verification_status != "approved":
            continue
        if leaderboard_filter.competition_type and card.competition_type != leaderboard_filter.competition_type:
            continue
        if leaderboard_filter.category and card.category != leaderboard_filter.category:
            continue
        if leaderboard_filter.competition_id and card.competition_id != leaderboard_filter.competition_id:
            continue
        if since is not None and card.submitted_at < since:
            continue
        selected.append(card)

    return selected


def aggregate(
    approved_cards: list[ScoreCard],
    leaderboard_filter: Optional[LeaderboardFilter] = None,
    now: Optional[datetime] = None,
    limit: Optional[int] = None
) -> list[LeaderboardEntry]:
    """
    Group approved cards by competitor and rank them.

    Ranks are 1..N with no gaps or shared positions. `limit` truncates after
    ranking. Empty input gives an empty list.
    """
    leaderboard_filter = leaderboard_filter or LeaderboardFilter()
    now = now or datetime.now(timezone.utc)

    by_competitor: dict[str, list[ScoreCard]] = defaultdict(list)
    for card in filter_cards(approved_cards, leaderboard_filter, now):
        by_competitor[card.competitor_id].append(card)

    stats = []
    for competitor_id, cards in by_competitor.items():
        totals = [c.total_score for c in cards]
        stats.append({
            "competitor_id": competitor_id,
            "average_score": sum(totals) / len(totals),
            "best_score": max(totals),
            "total_x_count": sum(c.x_count for c in cards),
            "competitions_count": len({c.competition_id for c in cards}),
            "first_submitted_at": min(c.submitted_at for c in cards),
        })

    stats.sort(key=lambda s: (
        -s["average_score"],
        -s["total_x_count"],
        s["first_submitted_at"],
        s["competitor_id"],
    ))

    if limit is not None:
        stats = stats[:limit]

    return [
        LeaderboardEntry(
            rank=idx + 1,
            competitor_id=s["competitor_id"],
            average_score=s["average_score"],
            best_score=s["best_score"],
            total_x_count=s["total_x_count"],
            competitions_count=s["competitions_count"],
        )
        for idx, s in enumerate(stats)
    ]


class LeaderboardService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.score_repo = ScoreCardRepository(db)
        self.competitor_repo = CompetitorRepository(db)

    async def _fetch_cards(
        self,
        leaderboard_filter: LeaderboardFilter,
        now: datetime
    ) -> list[ScoreCard]:
        # Push what we can to Mongo; aggregate() re-applies the full filter
        return await self.score_repo.get_approved(
            competition_type=leaderboard_filter.competition_type,
            category=leaderboard_filter.category,
            competition_id=leaderboard_filter.competition_id,
            since=time_frame_start(leaderboard_filter.time_frame, now),
        )

    async def get_leaderboard(
        self,
        leaderboard_filter: Optional[LeaderboardFilter] = None,
        limit: int = 50,
        now: Optional[datetime] = None
    ) -> list[LeaderboardEntry]:
        """Leaderboard for any combination of type, category and time frame."""
        leaderboard_filter = leaderboard_filter or LeaderboardFilter()
        now = now or datetime.now(timezone.utc)

        cards = await self._fetch_cards(leaderboard_filter, now)
        return aggregate(cards, leaderboard_filter, now, limit)

    async def get_competition_leaderboard(
        self,
        competition_id: str,
        limit: int = 50
    ) -> list[LeaderboardEntry]:
        """Leaderboard scoped to a single competition."""
        return await self.get_leaderboard(
            LeaderboardFilter(competition_id=competition_id),
            limit=limit
        )

    async def get_competitor_position(
        self,
        competitor_id: str,
        leaderboard_filter: Optional[LeaderboardFilter] = None,
        now: Optional[datetime] = None
    ) -> LeaderboardEntry:
        """
        Profile statistics: the competitor's entry (with rank) in a leaderboard.

        Raises LeaderboardNotFoundError if they have no approved cards in it.
        """
        leaderboard_filter = leaderboard_filter or LeaderboardFilter()
        now = now or datetime.now(timezone.utc)

        cards = await self._fetch_cards(leaderboard_filter, now)
        for entry in aggregate(cards, leaderboard_filter, now):
            if entry.competitor_id == competitor_id:
                return entry

        raise LeaderboardNotFoundError(
            f"Competitor {competitor_id} has no approved scores in this leaderboard"
        )

    async def get_competitors(self, entries: list[LeaderboardEntry]) -> dict[str, Competitor]:
        """Competitor records for a page of entries, keyed by id."""
        competitors = await self.competitor_repo.get_many([e.competitor_id for e in entries])
        return {c.id: c for c in competitors}
