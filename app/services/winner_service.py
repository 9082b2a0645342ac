"""
WinnerService - "Who won?" summaries built on the leaderboard aggregation.

A competition's winner is rank 1 of the leaderboard scoped to that
competition. The latest winner is the winner of the most recent competition
that has any approved card.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel

from app.models.competition import Competition
from app.models.leaderboard import LeaderboardEntry, LeaderboardFilter
from app.models.score_card import ScoreCard
from app.repositories.competition_repository import CompetitionRepository
from app.repositories.score_card_repository import ScoreCardRepository
from app.services.leaderboard_service import aggregate

logger = logging.getLogger(__name__)


class WinnerServiceError(Exception):
    pass


class CompetitionNotFoundError(WinnerServiceError):
    pass


class CompetitionWinner(BaseModel):
    """Winner of a competition"""

    competition_id: str
    competition_name: str
    entry: LeaderboardEntry


def resolve_winner(
    competition_id: str,
    approved_cards: list[ScoreCard]
) -> Optional[LeaderboardEntry]:
    """Rank 1 of the competition's leaderboard, or None without approved cards."""
    entries = aggregate(
        approved_cards,
        LeaderboardFilter(competition_id=competition_id),
        limit=1
    )
    return entries[0] if entries else None


def resolve_latest_winner(
    competitions: list[Competition],
    approved_cards: list[ScoreCard]
) -> Optional[CompetitionWinner]:
    """
    Walk competitions (newest first) and return the first one with a winner.
    """
    for competition in competitions:
        entry = resolve_winner(competition.id, approved_cards)
        if entry is not None:
            return CompetitionWinner(
                competition_id=competition.id,
                competition_name=competition.name,
                entry=entry,
            )
    return None


class WinnerService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.competition_repo = CompetitionRepository(db)
        self.score_repo = ScoreCardRepository(db)

    async def get_competition_winner(self, competition_id: str) -> Optional[CompetitionWinner]:
        competition = await self.competition_repo.get_by_id(competition_id)
        if not competition:
            raise CompetitionNotFoundError(f"Competition {competition_id} not found")

        cards = await self.score_repo.get_approved(competition_id=competition_id)
        entry = resolve_winner(competition_id, cards)
        if entry is None:
            return None

        return CompetitionWinner(
            competition_id=competition.id,
            competition_name=competition.name,
            entry=entry,
        )

    async def get_latest_winner(self, lookback: int = 20) -> Optional[CompetitionWinner]:
        """Winner of the most recent competition (of the last `lookback`) with approved cards."""
        competitions = await self.competition_repo.get_recent(limit=lookback)
        if not competitions:
            return None

        cards = await self.score_repo.get_approved(
            competition_ids=[c.id for c in competitions]
        )
        winner = resolve_latest_winner(competitions, cards)

        if winner is None:
            logger.info("No approved cards in the last %d competitions", len(competitions))
        return winner
