"""
CompetitorRepository - MongoDB access for competitors collection.
"""

from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.models.competitor import Competitor


class CompetitorRepository:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["competitors"]

    async def get_by_id(self, competitor_id: str) -> Optional[Competitor]:
        """Get competitor by ID."""
        doc = await self.collection.find_one({"_id": competitor_id})
        return Competitor(**doc) if doc else None

    async def get_many(self, competitor_ids: list[str]) -> list[Competitor]:
        """Get several competitors at once (order not guaranteed)."""
        if not competitor_ids:
            return []
        cursor = self.collection.find({"_id": {"$in": competitor_ids}})
        docs = await cursor.to_list(length=None)
        return [Competitor(**doc) for doc in docs]

    async def set_classification(
        self,
        competitor_id: str,
        classification: str,
        updated_at: datetime
    ) -> Optional[Competitor]:
        """Overwrite the cached classification label."""
        result = await self.collection.find_one_and_update(
            {"_id": competitor_id},
            {"$set": {
                "classification": classification,
                "classification_updated_at": updated_at,
            }},
            return_document=ReturnDocument.AFTER
        )

        return Competitor(**result) if result else None

    async def exists(self, competitor_id: str) -> bool:
        """Check if competitor exists."""
        count = await self.collection.count_documents({"_id": competitor_id}, limit=1)
        return count > 0
