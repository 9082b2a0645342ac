"""
Controlador de salud - Endpoint de comprobación del servicio
"""

from fastapi import APIRouter
from pydantic import BaseModel

from app.database import Database
from app.services.classification_service import get_classification_policy


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Respuesta del chequeo de estado."""
    status: str
    database: str
    tiers: list[str]


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Verifica que la API esté levantada, si hay conexión a la base
    y qué tabla de clasificaciones está cargada (de mayor a menor).
    """
    db_status = "connected" if Database.db is not None else "disconnected"
    policy = get_classification_policy()

    return HealthResponse(
        status="ok",
        database=db_status,
        tiers=[tier.name for tier in policy.tiers]
    )
