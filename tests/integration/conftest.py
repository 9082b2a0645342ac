"""
Fixtures for integration tests

The API runs in-process via ASGITransport (the lifespan, and therefore the
Mongo connection, is not started). Services get their repositories replaced
with AsyncMocks so requests exercise the real controllers and engine.
"""

import pytest
import pytest_asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.core.dependencies import (
    get_classification_service,
    get_leaderboard_service,
    get_score_service,
    get_winner_service,
)
from app.services.classification_service import ClassificationService
from app.services.leaderboard_service import LeaderboardService
from app.services.score_service import ScoreService
from app.services.winner_service import WinnerService


@pytest.fixture
def recent(card_factory):
    """Card factory anchored at the real current time (services use now())."""
    def factory(*args, **kwargs):
        kwargs.setdefault("now", datetime.now(timezone.utc))
        return card_factory(*args, **kwargs)
    return factory


@pytest.fixture
def services(policy):
    """Services wired to mocked repositories."""
    classification = ClassificationService(MagicMock(), policy=policy)
    classification.score_repo = AsyncMock()
    classification.competitor_repo = AsyncMock()

    leaderboard = LeaderboardService(MagicMock())
    leaderboard.score_repo = AsyncMock()
    leaderboard.competitor_repo = AsyncMock()
    leaderboard.competitor_repo.get_many.return_value = []

    winner = WinnerService(MagicMock())
    winner.score_repo = AsyncMock()
    winner.competition_repo = AsyncMock()

    score = ScoreService(MagicMock(), classification)
    score.score_repo = AsyncMock()
    score.competition_repo = AsyncMock()
    score.competitor_repo = AsyncMock()

    return {
        "classification": classification,
        "leaderboard": leaderboard,
        "winner": winner,
        "score": score,
    }


@pytest_asyncio.fixture
async def client(services):
    """HTTP client for testing API endpoints with service dependencies overridden."""
    app.dependency_overrides[get_classification_service] = lambda: services["classification"]
    app.dependency_overrides[get_leaderboard_service] = lambda: services["leaderboard"]
    app.dependency_overrides[get_winner_service] = lambda: services["winner"]
    app.dependency_overrides[get_score_service] = lambda: services["score"]

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
