"""
Controlador de tarjetas - Envío, carga de admin, historial, verificación y purge
"""

from fastapi import APIRouter, HTTPException, Query, status

from app.core.dependencies import Scores
from app.models.score_card import (
    AdminScoreSubmission,
    ScoreCard,
    ScoreCardResponse,
    ScoreSubmission,
    ScoreVerification
)
from app.services.score_service import (
    CompetitionClosedError,
    CompetitionNotFoundError,
    CompetitorNotFoundError,
    ScoreCardAlreadyVerifiedError,
    ScoreCardNotFoundError
)
from app.services.score_validator import ScoreCardValidationError


router = APIRouter(prefix="/scores", tags=["scores"])


def to_response(card: ScoreCard) -> ScoreCardResponse:
    return ScoreCardResponse(
        id=card.id,
        competitor_id=card.competitor_id,
        competition_id=card.competition_id,
        total_score=card.total_score,
        x_count=card.x_count,
        verification_status=card.verification_status,
        submitted_at=card.submitted_at,
        competition_type=card.competition_type,
        category=card.category,
        submitted_by=card.submitted_by
    )


@router.post("", response_model=ScoreCardResponse, status_code=status.HTTP_201_CREATED)
async def submit_score(
    submission: ScoreSubmission,
    score_service: Scores
):
    """
    Enviar una tarjeta.

    El total y la cantidad de X se calculan acá desde los disparos;
    la tarjeta queda pending hasta que un admin la verifique.
    """
    try:
        card = await score_service.submit_score(
            submission.competitor_id,
            submission.competition_id,
            submission.shots
        )
    except ScoreCardValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": type(e).__name__, "message": str(e)}
        )
    except (CompetitionNotFoundError, CompetitorNotFoundError) as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except CompetitionClosedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    return to_response(card)


@router.post("/admin", response_model=ScoreCardResponse, status_code=status.HTTP_201_CREATED)
async def submit_score_as_admin(
    submission: AdminScoreSubmission,
    score_service: Scores
):
    """
    Cargar una tarjeta en nombre de un competidor.

    Pasa por las mismas validaciones pero entra aprobada,
    así que recalcula la clasificación del competidor.
    """
    try:
        card = await score_service.submit_score_as_admin(
            submission.competitor_id,
            submission.competition_id,
            submission.shots,
            submission.submitted_by,
            submission.notes
        )
    except ScoreCardValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": type(e).__name__, "message": str(e)}
        )
    except (CompetitionNotFoundError, CompetitorNotFoundError) as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except CompetitionClosedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    return to_response(card)


@router.get("/pending", response_model=list[ScoreCardResponse])
async def get_pending_scores(
    score_service: Scores,
    limit: int = Query(100, ge=1, le=500)
):
    """
    Tarjetas pendientes de verificación.
    """
    cards = await score_service.get_pending(limit)
    return [to_response(card) for card in cards]


@router.get("/user/{competitor_id}", response_model=list[ScoreCardResponse])
async def get_competitor_scores(
    competitor_id: str,
    score_service: Scores,
    limit: int = Query(100, ge=1, le=500)
):
    """
    Historial de tarjetas de un competidor (todos los estados).
    """
    try:
        cards = await score_service.get_competitor_scores(competitor_id, limit)
    except CompetitorNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return [to_response(card) for card in cards]


@router.get("/competition/{competition_id}", response_model=list[ScoreCardResponse])
async def get_competition_scores(
    competition_id: str,
    score_service: Scores,
    limit: int = Query(500, ge=1, le=1000)
):
    """
    Todas las tarjetas de una competición.
    """
    try:
        cards = await score_service.get_competition_scores(competition_id, limit)
    except CompetitionNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return [to_response(card) for card in cards]


@router.put("/{card_id}/verify", response_model=ScoreCardResponse)
async def verify_score(
    card_id: str,
    verification: ScoreVerification,
    score_service: Scores
):
    """
    Aprobar, rechazar o marcar una tarjeta pending.

    Al aprobar se recalcula la clasificación del competidor.
    """
    try:
        card = await score_service.verify_score(
            card_id,
            verification.status,
            verification.notes
        )
    except ScoreCardNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ScoreCardAlreadyVerifiedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    return to_response(card)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def purge_score(
    card_id: str,
    score_service: Scores
):
    """
    Borrar una tarjeta (purge de admin).
    """
    try:
        await score_service.purge_score(card_id)
    except ScoreCardNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
