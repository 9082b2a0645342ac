"""
🎯 ScoreCardRepository - CRUD para tarjetas de puntuación

Las lecturas para leaderboards y clasificaciones solo devuelven
tarjetas aprobadas; el filtrado fino lo hace el motor de ranking.
"""

from datetime import datetime
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.models.score_card import ScoreCard


class ScoreCardRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["scores"]

    # ============================================
    # 📌 CREATE
    # ============================================

    async def create(self, card: ScoreCard) -> ScoreCard:
        """Guarda una tarjeta nueva (pending, o approved si la carga un admin)"""
        card_dict = card.model_dump(by_alias=True)

        try:
            await self.collection.insert_one(card_dict)
            return card
        except DuplicateKeyError:
            raise ValueError(f"Score card {card.id} already exists")

    # ============================================
    # 📌 READ
    # ============================================

    async def get_by_id(self, card_id: str) -> Optional[ScoreCard]:
        """Obtiene una tarjeta por ID"""
        doc = await self.collection.find_one({"_id": card_id})
        return ScoreCard(**doc) if doc else None

    async def get_approved(
        self,
        competition_type: Optional[str] = None,
        category: Optional[str] = None,
        competition_id: Optional[str] = None,
        competition_ids: Optional[list[str]] = None,
        since: Optional[datetime] = None
    ) -> list[ScoreCard]:
        """
        🔥 Tarjetas aprobadas con filtros opcionales

        Es el snapshot que consume el leaderboard en cada lectura
        """
        query: dict = {"verification_status": "approved"}

        if competition_type:
            query["competition_type"] = competition_type
        if category:
            query["category"] = category
        if competition_id:
            query["competition_id"] = competition_id
        elif competition_ids is not None:
            query["competition_id"] = {"$in": competition_ids}
        if since is not None:
            query["submitted_at"] = {"$gte": since}

        cursor = self.collection.find(query).sort("submitted_at", 1)
        docs = await cursor.to_list(length=None)
        return [ScoreCard(**doc) for doc in docs]

    async def get_approved_for_competitor(
        self,
        competitor_id: str,
        since: Optional[datetime] = None
    ) -> list[ScoreCard]:
        """Historial aprobado de un competidor (más recientes primero)"""
        query: dict = {
            "competitor_id": competitor_id,
            "verification_status": "approved",
        }
        if since is not None:
            query["submitted_at"] = {"$gte": since}

        cursor = self.collection.find(query).sort("submitted_at", -1)
        docs = await cursor.to_list(length=None)
        return [ScoreCard(**doc) for doc in docs]

    async def get_by_competitor(self, competitor_id: str, limit: int = 100) -> list[ScoreCard]:
        """Todas las tarjetas de un competidor, cualquier estado (más recientes primero)"""
        cursor = self.collection.find(
            {"competitor_id": competitor_id}
        ).sort("submitted_at", -1).limit(limit)

        docs = await cursor.to_list(length=limit)
        return [ScoreCard(**doc) for doc in docs]

    async def get_by_competition(self, competition_id: str, limit: int = 500) -> list[ScoreCard]:
        """Tarjetas de una competición, cualquier estado (más recientes primero)"""
        cursor = self.collection.find(
            {"competition_id": competition_id}
        ).sort("submitted_at", -1).limit(limit)

        docs = await cursor.to_list(length=limit)
        return [ScoreCard(**doc) for doc in docs]

    async def get_pending(self, limit: int = 100) -> list[ScoreCard]:
        """Tarjetas pendientes de verificación (las más viejas primero)"""
        cursor = self.collection.find(
            {"verification_status": "pending"}
        ).sort("submitted_at", 1).limit(limit)

        docs = await cursor.to_list(length=limit)
        return [ScoreCard(**doc) for doc in docs]

    # ============================================
    # 📌 UPDATE
    # ============================================

    async def set_verification(
        self,
        card_id: str,
        status: str,
        notes: Optional[str],
        verified_at: datetime
    ) -> Optional[ScoreCard]:
        """
        Cambia el estado de una tarjeta pending

        Solo actualiza si sigue en pending, así la verificación es única
        """
        result = await self.collection.find_one_and_update(
            {"_id": card_id, "verification_status": "pending"},
            {
                "$set": {
                    "verification_status": status,
                    "verification_notes": notes,
                    "verified_at": verified_at,
                }
            },
            return_document=ReturnDocument.AFTER
        )

        return ScoreCard(**result) if result else None

    # ============================================
    # 📌 DELETE
    # ============================================

    async def delete(self, card_id: str) -> bool:
        """Elimina una tarjeta (purge de admin)"""
        result = await self.collection.delete_one({"_id": card_id})
        return result.deleted_count > 0
