"""
Pytest fixtures and configuration for all tests.
"""

import os

# Settings() needs these before any app module is imported
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB_NAME", "xring_classic_test")

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from app.models.classification import ClassificationTier
from app.models.competition import Competition
from app.models.score_card import ScoreCard
from app.services.classification_service import ClassificationPolicy


NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)

_card_ids = itertools.count(1)


def make_card(
    competitor_id: str = "shooter1",
    total_score: int = 240,
    x_count: int = 5,
    days_ago: float = 1,
    competition_id: str = "comp1",
    status: str = "approved",
    competition_type: str = "indoor",
    category: str | None = None,
    now: datetime = NOW,
) -> ScoreCard:
    """Build a card directly from its totals (shots are not needed by the engine)."""
    return ScoreCard(
        id=f"card{next(_card_ids):05d}",
        competitor_id=competitor_id,
        competition_id=competition_id,
        shots=[],
        total_score=total_score,
        x_count=x_count,
        verification_status=status,
        submitted_at=now - timedelta(days=days_ago),
        competition_type=competition_type,
        category=category,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture
def policy():
    """Default tier table: Grand Master > Master > Diamond > Platinum > Gold > Bronze."""
    return ClassificationPolicy(tiers=[
        ClassificationTier(name="Grand Master", min_average_score=249.0, min_average_x_count=15),
        ClassificationTier(name="Master", min_average_score=247.0, min_average_x_count=10),
        ClassificationTier(name="Diamond", min_average_score=245.0, min_average_x_count=8),
        ClassificationTier(name="Platinum", min_average_score=242.0, min_average_x_count=6),
        ClassificationTier(name="Gold", min_average_score=238.0, min_average_x_count=0),
        ClassificationTier(name="Bronze", min_average_score=0, min_average_x_count=0),
    ])


@pytest.fixture
def sample_competition():
    """Published 25-shot indoor competition."""
    return Competition(
        id="comp1",
        name="X-Ring Classic Indoor #1",
        competition_type="indoor",
        category="prone",
        shots_per_target=25,
        status="published",
        start_date=datetime(2026, 6, 1, tzinfo=timezone.utc),
    )
