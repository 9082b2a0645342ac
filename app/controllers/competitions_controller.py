"""
Controlador de competiciones - Ganadores por competición
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from app.core.dependencies import Winners
from app.services.winner_service import CompetitionNotFoundError, CompetitionWinner


router = APIRouter(prefix="/competitions", tags=["competitions"])


@router.get("/latest-winner", response_model=Optional[CompetitionWinner])
async def get_latest_winner(
    winner_service: Winners,
    lookback: int = Query(20, ge=1, le=100, description="How many recent competitions to check")
):
    """
    Ganador de la competición más reciente que tenga tarjetas aprobadas.

    Devuelve null si ninguna de las últimas competiciones tiene resultados.
    """
    return await winner_service.get_latest_winner(lookback)


@router.get("/{competition_id}/winner", response_model=Optional[CompetitionWinner])
async def get_competition_winner(
    competition_id: str,
    winner_service: Winners
):
    """
    Ganador (rank 1) de una competición, o null si aún no hay tarjetas aprobadas.
    """
    try:
        return await winner_service.get_competition_winner(competition_id)
    except CompetitionNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
