"""
Controlador de competidores - Clasificación y estadísticas de perfil
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from app.core.dependencies import Classifications, Leaderboards
from app.models.classification import ClassificationResult
from app.models.leaderboard import LeaderboardFilter
from app.services.classification_service import CompetitorNotFoundError
from app.services.leaderboard_service import LeaderboardNotFoundError


router = APIRouter(prefix="/competitors", tags=["competitors"])


class CompetitorStatsResponse(BaseModel):
    """Estadísticas de perfil: posición en el leaderboard general + clasificación."""
    competitor_id: str
    rank: Optional[int] = None
    average_score: float = 0.0
    best_score: int = 0
    total_x_count: int = 0
    competitions_count: int = 0
    classification: ClassificationResult


@router.get("/{competitor_id}/classification", response_model=ClassificationResult)
async def get_classification(
    competitor_id: str,
    classification_service: Classifications
):
    """
    Calcular la clasificación del competidor en el momento (sin guardarla).
    """
    try:
        return await classification_service.classify_competitor(competitor_id)
    except CompetitorNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.post("/{competitor_id}/classification/refresh", response_model=ClassificationResult)
async def refresh_classification(
    competitor_id: str,
    classification_service: Classifications
):
    """
    Recalcular la clasificación y guardarla en el competidor.
    """
    try:
        return await classification_service.refresh(competitor_id)
    except CompetitorNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.get("/{competitor_id}/stats", response_model=CompetitorStatsResponse)
async def get_competitor_stats(
    competitor_id: str,
    classification_service: Classifications,
    leaderboard_service: Leaderboards
):
    """
    Estadísticas del perfil.

    Usa la misma agregación que el leaderboard general, así el promedio
    del perfil y el del leaderboard siempre coinciden.
    """
    try:
        classification = await classification_service.classify_competitor(competitor_id)
    except CompetitorNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    try:
        entry = await leaderboard_service.get_competitor_position(
            competitor_id, LeaderboardFilter()
        )
    except LeaderboardNotFoundError:
        # Sin tarjetas aprobadas: perfil vacío pero válido
        return CompetitorStatsResponse(
            competitor_id=competitor_id,
            classification=classification
        )

    return CompetitorStatsResponse(
        competitor_id=competitor_id,
        rank=entry.rank,
        average_score=round(entry.average_score, 2),
        best_score=entry.best_score,
        total_x_count=entry.total_x_count,
        competitions_count=entry.competitions_count,
        classification=classification
    )
