"""
Dependencies de FastAPI para inyeccion de BD y servicios
"""

from typing import Annotated

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_database
from app.services.classification_service import ClassificationService
from app.services.leaderboard_service import LeaderboardService
from app.services.score_service import ScoreService
from app.services.winner_service import WinnerService


Database = Annotated[AsyncIOMotorDatabase, Depends(get_database)]


def get_classification_service(db: Database) -> ClassificationService:
    return ClassificationService(db)


def get_leaderboard_service(db: Database) -> LeaderboardService:
    return LeaderboardService(db)


def get_winner_service(db: Database) -> WinnerService:
    return WinnerService(db)


def get_score_service(
    db: Database,
    classification_service: Annotated[ClassificationService, Depends(get_classification_service)]
) -> ScoreService:
    # Misma instancia que usa el request para recalcular al aprobar
    return ScoreService(db, classification_service)


# Alias de tipos para que se vea mas limpio en los endpoints
Classifications = Annotated[ClassificationService, Depends(get_classification_service)]
Leaderboards = Annotated[LeaderboardService, Depends(get_leaderboard_service)]
Winners = Annotated[WinnerService, Depends(get_winner_service)]
Scores = Annotated[ScoreService, Depends(get_score_service)]
