"""
ScoreService - Business logic for score cards.

Handles submission (validation + derived totals), admin entry on a
competitor's behalf, verification, purge and score history reads.
Every change to the approved set refreshes the competitor's cached
classification; a failed refresh is logged and never undoes the change.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.score_card import ScoreCard, Shot
from app.repositories.competition_repository import CompetitionRepository
from app.repositories.competitor_repository import CompetitorRepository
from app.repositories.score_card_repository import ScoreCardRepository
from app.services.classification_service import ClassificationService, ClassificationServiceError
from app.services.score_validator import ScoreCardValidationError, validate_shots

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("approved", "rejected", "flagged")


class ScoreServiceError(Exception):
    """Base exception for score service errors."""
    pass


class ScoreCardNotFoundError(ScoreServiceError):
    """Raised when the score card does not exist."""
    pass


class CompetitionNotFoundError(ScoreServiceError):
    """Raised when the competition does not exist."""
    pass


class CompetitorNotFoundError(ScoreServiceError):
    """Raised when the competitor does not exist."""
    pass


class CompetitionClosedError(ScoreServiceError):
    """Raised when the competition is not open for submissions."""
    pass


class ScoreCardAlreadyVerifiedError(ScoreServiceError):
    """Raised when a card already left the pending state."""
    pass


class ScoreService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        classification_service: Optional[ClassificationService] = None
    ):
        self.score_repo = ScoreCardRepository(db)
        self.competition_repo = CompetitionRepository(db)
        self.competitor_repo = CompetitorRepository(db)
        self.classification_service = classification_service or ClassificationService(db)

    async def _build_card(
        self,
        competitor_id: str,
        competition_id: str,
        shots: list[Shot]
    ) -> ScoreCard:
        """
        Checks shared by every submission path; returns an unsaved pending card.

        Validates:
        - Competition exists and is published
        - Competitor exists
        - Shots match the competition's shot count, values 0-10, X only on 10s
        """
        competition = await self.competition_repo.get_by_id(competition_id)
        if not competition:
            raise CompetitionNotFoundError(f"Competition {competition_id} not found")

        if competition.status != "published":
            raise CompetitionClosedError("Competition is not open for submissions")

        if not await self.competitor_repo.exists(competitor_id):
            raise CompetitorNotFoundError(f"Competitor {competitor_id} not found")

        try:
            validated = validate_shots(shots, competition.shots_per_target)
        except ScoreCardValidationError as e:
            logger.warning(
                "Rejected card competitor=%s competition=%s: %s: %s",
                competitor_id, competition_id, type(e).__name__, e
            )
            raise

        return ScoreCard(
            id=uuid.uuid4().hex,
            competitor_id=competitor_id,
            competition_id=competition_id,
            shots=validated.shots,
            total_score=validated.total_score,
            x_count=validated.x_count,
            verification_status="pending",
            submitted_at=datetime.now(timezone.utc),
            competition_type=competition.competition_type,
            category=competition.category,
        )

    async def _refresh_classification(self, competitor_id: str) -> None:
        # La clasificación guardada es una cache; si falla queda la anterior
        try:
            await self.classification_service.refresh(competitor_id)
        except ClassificationServiceError as e:
            logger.warning(
                "Classification refresh failed for competitor=%s: %s: %s",
                competitor_id, type(e).__name__, e
            )

    async def submit_score(
        self,
        competitor_id: str,
        competition_id: str,
        shots: list[Shot]
    ) -> ScoreCard:
        """
        Validate and store a new card as pending.

        Raises ScoreCardValidationError subclasses for malformed cards.
        """
        card = await self._build_card(competitor_id, competition_id, shots)
        return await self.score_repo.create(card)

    async def submit_score_as_admin(
        self,
        competitor_id: str,
        competition_id: str,
        shots: list[Shot],
        submitted_by: str,
        notes: Optional[str] = None
    ) -> ScoreCard:
        """
        Admin entry on a competitor's behalf.

        Same checks as a regular submission, but the card is stored already
        approved and the competitor's classification is refreshed.
        """
        card = await self._build_card(competitor_id, competition_id, shots)
        card = card.model_copy(update={
            "verification_status": "approved",
            "verified_at": card.submitted_at,
            "verification_notes": notes,
            "submitted_by": submitted_by,
        })

        created = await self.score_repo.create(card)
        logger.info(
            "Score card %s entered by %s for competitor=%s (approved)",
            created.id, submitted_by, competitor_id
        )

        await self._refresh_classification(competitor_id)
        return created

    async def get_pending(self, limit: int = 100) -> list[ScoreCard]:
        """Cards waiting for verification, oldest first."""
        return await self.score_repo.get_pending(limit)

    async def get_competitor_scores(self, competitor_id: str, limit: int = 100) -> list[ScoreCard]:
        """Score history of a competitor (every status), newest first."""
        if not await self.competitor_repo.exists(competitor_id):
            raise CompetitorNotFoundError(f"Competitor {competitor_id} not found")
        return await self.score_repo.get_by_competitor(competitor_id, limit)

    async def get_competition_scores(self, competition_id: str, limit: int = 500) -> list[ScoreCard]:
        """Every card submitted to a competition, newest first."""
        if not await self.competition_repo.get_by_id(competition_id):
            raise CompetitionNotFoundError(f"Competition {competition_id} not found")
        return await self.score_repo.get_by_competition(competition_id, limit)

    async def verify_score(
        self,
        card_id: str,
        status: str,
        notes: Optional[str] = None
    ) -> ScoreCard:
        """
        Move a pending card to approved, rejected or flagged.

        The transition happens once; approving refreshes the classification.
        """
        if status not in TERMINAL_STATUSES:
            raise ValueError(f"Invalid verification status: {status}")

        card = await self.score_repo.get_by_id(card_id)
        if not card:
            raise ScoreCardNotFoundError(f"Score card {card_id} not found")

        if card.verification_status != "pending":
            raise ScoreCardAlreadyVerifiedError(
                f"Score card {card_id} is already {card.verification_status}"
            )

        updated = await self.score_repo.set_verification(
            card_id, status, notes, datetime.now(timezone.utc)
        )
        if not updated:
            # Otro admin lo verificó entre el get y el update
            raise ScoreCardAlreadyVerifiedError(f"Score card {card_id} is no longer pending")

        logger.info("Score card %s %s", card_id, status)

        if status == "approved":
            await self._refresh_classification(updated.competitor_id)

        return updated

    async def purge_score(self, card_id: str) -> None:
        """Delete a card (admin purge). Recomputes if it counted."""
        card = await self.score_repo.get_by_id(card_id)
        if not card:
            raise ScoreCardNotFoundError(f"Score card {card_id} not found")

        await self.score_repo.delete(card_id)
        logger.info("Score card %s purged (was %s)", card_id, card.verification_status)

        if card.verification_status == "approved":
            await self._refresh_classification(card.competitor_id)
