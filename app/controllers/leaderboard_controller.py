"""
Controlador de leaderboards - Endpoints de clasificación

Los leaderboards se recalculan en cada lectura desde las tarjetas aprobadas.
El orden y el campo rank se devuelven tal cual los calcula el servicio.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.dependencies import Leaderboards
from app.models.competitor import Competitor
from app.models.leaderboard import LeaderboardEntry, LeaderboardFilter, TimeFrame
from app.services.classification_service import display_classification


router = APIRouter(prefix="/leaderboards", tags=["leaderboards"])

settings = get_settings()


class LeaderboardEntryResponse(BaseModel):
    """Entrada del leaderboard (competidor y estadísticas)."""
    rank: int
    competitor_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    classification: Optional[str] = None
    average_score: float
    best_score: int
    total_x_count: int
    competitions_count: int


class LeaderboardResponse(BaseModel):
    """Leaderboard con las entradas ya ordenadas."""
    entries: list[LeaderboardEntryResponse]


def to_entry_response(
    entry: LeaderboardEntry,
    competitor: Optional[Competitor]
) -> LeaderboardEntryResponse:
    return LeaderboardEntryResponse(
        rank=entry.rank,
        competitor_id=entry.competitor_id,
        username=competitor.username if competitor else None,
        first_name=competitor.first_name if competitor else None,
        last_name=competitor.last_name if competitor else None,
        classification=display_classification(competitor),
        average_score=round(entry.average_score, 2),
        best_score=entry.best_score,
        total_x_count=entry.total_x_count,
        competitions_count=entry.competitions_count,
    )


async def build_response(
    leaderboard_service,
    entries: list[LeaderboardEntry]
) -> LeaderboardResponse:
    competitors = await leaderboard_service.get_competitors(entries)
    return LeaderboardResponse(
        entries=[to_entry_response(e, competitors.get(e.competitor_id)) for e in entries]
    )


@router.get("/competition/{competition_id}", response_model=LeaderboardResponse)
async def get_competition_leaderboard(
    competition_id: str,
    leaderboard_service: Leaderboards,
    limit: int = Query(settings.leaderboard_default_limit, ge=1, le=settings.leaderboard_max_limit)
):
    """
    Obtener el leaderboard de una competición específica.
    """
    entries = await leaderboard_service.get_competition_leaderboard(competition_id, limit)
    return await build_response(leaderboard_service, entries)


@router.get("/{scope}", response_model=LeaderboardResponse)
async def get_leaderboard(
    scope: Literal["overall", "indoor", "outdoor"],
    leaderboard_service: Leaderboards,
    category: Optional[str] = Query(None, description="Weapon category (prone, standing, benchrest...)"),
    time_frame: TimeFrame = Query("all_time", description="all_time | this_year | this_month | last_30_days"),
    limit: int = Query(settings.leaderboard_default_limit, ge=1, le=settings.leaderboard_max_limit)
):
    """
    Obtener el leaderboard general, indoor u outdoor.

    Se puede filtrar además por categoría y período.
    """
    leaderboard_filter = LeaderboardFilter(
        competition_type=None if scope == "overall" else scope,
        category=category,
        time_frame=time_frame,
    )
    entries = await leaderboard_service.get_leaderboard(leaderboard_filter, limit)

    return await build_response(leaderboard_service, entries)
