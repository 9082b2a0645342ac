"""
ClassificationService - Turns a competitor's approved cards into a skill tier.

The rule is "best 6 of the last 10 approved cards from the trailing 12 months":

1. Keep approved cards submitted inside the window ending at `now`.
2. The 10 most recent of those are the candidate set.
3. The best 6 candidates (total desc, X-count desc, earliest first) qualify.
   With fewer than 6 candidates every candidate qualifies and the result is
   provisional.
4. The tier is the highest one whose average-score and average-X thresholds
   are both met by the qualifying set; the lowest tier is the fallback.

`classify` is pure. `ClassificationService` only fetches the cards and writes
the resulting label back to the competitor as a cache.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, model_validator

from app.core.config import get_settings
from app.models.classification import ClassificationTier, ClassificationResult
from app.models.competitor import Competitor
from app.models.score_card import ScoreCard
from app.repositories.competitor_repository import CompetitorRepository
from app.repositories.score_card_repository import ScoreCardRepository

logger = logging.getLogger(__name__)

PROVISIONAL_PREFIX = "Provisional "


class ClassificationServiceError(Exception):
    """Base exception for classification errors."""
    pass


class ClassificationConfigError(ClassificationServiceError):
    """Raised when the classification policy is unusable."""
    pass


class TierConfigurationError(ClassificationConfigError):
    """Raised when the tier table is empty or not strictly descending."""
    pass


class CompetitorNotFoundError(ClassificationServiceError):
    """Raised when the competitor does not exist."""
    pass


def validate_tier_table(tiers: list[ClassificationTier]) -> list[ClassificationTier]:
    """
    Check a tier table ordered from highest to lowest.

    Names must be unique and min_average_score strictly descending.
    """
    if not tiers:
        raise TierConfigurationError("Tier table is empty")

    names = [tier.name for tier in tiers]
    if len(set(names)) != len(names):
        raise TierConfigurationError(f"Tier names must be unique: {names}")

    for higher, lower in zip(tiers, tiers[1:]):
        if lower.min_average_score >= higher.min_average_score:
            raise TierConfigurationError(
                f"Tiers must be strictly descending by min_average_score: "
                f"{higher.name} ({higher.min_average_score}) is not above "
                f"{lower.name} ({lower.min_average_score})"
            )

    return tiers


class ClassificationPolicy(BaseModel):
    """Tier table plus the window/selection knobs, validated on creation."""

    tiers: list[ClassificationTier]
    window_days: int = 365
    candidate_count: int = 10
    qualifying_count: int = 6
    min_full_count: int = 6
    normalize_to: Optional[int] = None

    @model_validator(mode="after")
    def _check(self):
        validate_tier_table(self.tiers)
        if self.window_days <= 0:
            raise ClassificationConfigError("window_days must be positive")
        if not 0 < self.qualifying_count <= self.candidate_count:
            raise ClassificationConfigError(
                "qualifying_count must be between 1 and candidate_count"
            )
        if not 0 < self.min_full_count <= self.candidate_count:
            raise ClassificationConfigError(
                "min_full_count must be between 1 and candidate_count"
            )
        if self.normalize_to is not None and self.normalize_to <= 0:
            raise ClassificationConfigError("normalize_to must be positive")
        return self

    @property
    def default_tier(self) -> ClassificationTier:
        return self.tiers[-1]


@lru_cache()
def get_classification_policy() -> ClassificationPolicy:
    """Build the policy from settings (cached). Fails fast on a bad tier table."""
    settings = get_settings()
    return ClassificationPolicy(
        tiers=[
            ClassificationTier(**tier.model_dump())
            for tier in settings.classification_tiers
        ],
        window_days=settings.classification_window_days,
        candidate_count=settings.classification_candidate_count,
        qualifying_count=settings.classification_qualifying_count,
        min_full_count=settings.classification_min_full_count,
        normalize_to=settings.classification_normalize_to,
    )


def select_candidates(
    cards: list[ScoreCard],
    now: datetime,
    policy: ClassificationPolicy
) -> list[ScoreCard]:
    """Most recent approved cards inside the window, newest first."""
    window_start = now - timedelta(days=policy.window_days)
    recent = [
        card for card in cards
        if card.verification_status == "approved"
        and window_start <= card.submitted_at <= now
    ]
    recent.sort(key=lambda c: (c.submitted_at, c.id), reverse=True)
    return recent[:policy.candidate_count]


def select_qualifying(
    candidates: list[ScoreCard],
    policy: ClassificationPolicy
) -> list[ScoreCard]:
    """Best cards of the candidate set; all of them when there are too few."""
    ranked = sorted(
        candidates,
        key=lambda c: (-c.total_score, -c.x_count, c.submitted_at, c.id)
    )
    return ranked[:policy.qualifying_count]


def card_points(card: ScoreCard, normalize_to: Optional[int] = None) -> float:
    """Card total, optionally rescaled to a fixed per-card maximum."""
    if normalize_to is None or not card.shots:
        return float(card.total_score)
    max_points = len(card.shots) * 10
    return card.total_score / max_points * normalize_to


def match_tier(
    average_score: float,
    average_x_count: float,
    tiers: list[ClassificationTier]
) -> ClassificationTier:
    """Highest tier whose thresholds are both met, else the lowest tier."""
    for tier in tiers:
        if (average_score >= tier.min_average_score
                and average_x_count >= tier.min_average_x_count):
            return tier
    return tiers[-1]


def classify(
    competitor_id: str,
    approved_cards: list[ScoreCard],
    now: datetime,
    policy: Optional[ClassificationPolicy] = None
) -> ClassificationResult:
    """
    Classify a competitor from their approved card history.

    Non-approved cards and cards outside the window are ignored. With no
    usable cards the result is the provisional default tier.
    """
    policy = policy or get_classification_policy()

    candidates = select_candidates(approved_cards, now, policy)
    provisional = len(candidates) < policy.min_full_count

    if not candidates:
        tier = policy.default_tier
        return ClassificationResult(
            competitor_id=competitor_id,
            tier=tier.name,
            provisional=True,
            label=PROVISIONAL_PREFIX + tier.name,
            sample_count=0,
            qualifying_count=0,
            average_score=0.0,
            average_x_count=0.0,
        )

    qualifying = select_qualifying(candidates, policy)

    average_score = sum(card_points(c, policy.normalize_to) for c in qualifying) / len(qualifying)
    average_x_count = sum(c.x_count for c in qualifying) / len(qualifying)

    tier = match_tier(average_score, average_x_count, policy.tiers)

    return ClassificationResult(
        competitor_id=competitor_id,
        tier=tier.name,
        provisional=provisional,
        label=PROVISIONAL_PREFIX + tier.name if provisional else tier.name,
        sample_count=len(candidates),
        qualifying_count=len(qualifying),
        average_score=average_score,
        average_x_count=average_x_count,
    )


def display_classification(
    competitor: Optional[Competitor],
    result: Optional[ClassificationResult] = None
) -> Optional[str]:
    """Label to show: admin override first, then computed, then cached."""
    if competitor is not None and competitor.classification_override:
        return competitor.classification_override
    if result is not None:
        return result.label
    return competitor.classification if competitor is not None else None


class ClassificationService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        policy: Optional[ClassificationPolicy] = None
    ):
        self.score_repo = ScoreCardRepository(db)
        self.competitor_repo = CompetitorRepository(db)
        self.policy = policy or get_classification_policy()

    async def classify_competitor(
        self,
        competitor_id: str,
        now: Optional[datetime] = None
    ) -> ClassificationResult:
        """Compute the classification on demand, without persisting it."""
        competitor = await self.competitor_repo.get_by_id(competitor_id)
        if not competitor:
            raise CompetitorNotFoundError(f"Competitor {competitor_id} not found")

        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=self.policy.window_days)
        cards = await self.score_repo.get_approved_for_competitor(competitor_id, since=since)

        return classify(competitor_id, cards, now, self.policy)

    async def refresh(
        self,
        competitor_id: str,
        now: Optional[datetime] = None
    ) -> ClassificationResult:
        """
        Recompute and overwrite the cached classification.

        Full replace: concurrent refreshes for the same competitor write the
        same value.
        """
        now = now or datetime.now(timezone.utc)
        result = await self.classify_competitor(competitor_id, now)

        await self.competitor_repo.set_classification(competitor_id, result.label, now)

        logger.info(
            "Classification refreshed competitor=%s label=%s samples=%d avg=%.2f avg_x=%.2f",
            competitor_id,
            result.label,
            result.sample_count,
            result.average_score,
            result.average_x_count,
        )
        return result
