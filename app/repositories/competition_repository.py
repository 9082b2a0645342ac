"""
📅 CompetitionRepository - Lectura de competiciones

El CRUD de competiciones vive en otro servicio; acá solo se lee
lo que necesitan las tarjetas y los leaderboards.
"""

from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.competition import Competition


class CompetitionRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["competitions"]

    async def get_by_id(self, competition_id: str) -> Optional[Competition]:
        """Obtiene una competición por ID"""
        doc = await self.collection.find_one({"_id": competition_id})
        return Competition(**doc) if doc else None

    async def get_recent(self, limit: int = 20) -> list[Competition]:
        """
        Competiciones publicadas o terminadas, más recientes primero

        Orden que usa el resumen de "último ganador"
        """
        cursor = self.collection.find({
            "status": {"$in": ["published", "completed"]}
        }).sort("start_date", -1).limit(limit)

        docs = await cursor.to_list(length=limit)
        return [Competition(**doc) for doc in docs]
