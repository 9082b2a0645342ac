from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.models.score_card import CompetitionType


class Competition(BaseModel):
    """Lo mínimo de una competición que necesitan tarjetas y leaderboards"""

    id: str = Field(..., alias="_id")
    name: str

    competition_type: CompetitionType
    category: Optional[str] = None

    shots_per_target: int = 10

    status: str  # draft | published | completed | cancelled
    start_date: datetime

    class Config:
        populate_by_name = True
