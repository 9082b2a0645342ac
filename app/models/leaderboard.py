from typing import Literal, Optional
from pydantic import BaseModel

from app.models.score_card import CompetitionType


TimeFrame = Literal["all_time", "this_year", "this_month", "last_30_days"]


class LeaderboardEntry(BaseModel):
    """Entrada en una tabla de clasificación (resultado agregado)"""

    rank: int  # 1..N sin huecos ni empates

    competitor_id: str

    average_score: float
    best_score: int
    total_x_count: int
    competitions_count: int


class LeaderboardFilter(BaseModel):
    """Qué tarjetas entran en un leaderboard. None = sin filtro"""

    competition_type: Optional[CompetitionType] = None  # None = overall
    category: Optional[str] = None
    time_frame: TimeFrame = "all_time"
    competition_id: Optional[str] = None
