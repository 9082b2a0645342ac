from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, StrictBool, StrictInt


VerificationStatus = Literal["pending", "approved", "rejected", "flagged"]
CompetitionType = Literal["indoor", "outdoor"]


class Shot(BaseModel):
    """Un disparo puntuado. is_x solo vale si el disparo es un 10 centrado"""

    # Strict: un `true` o un "10" en el JSON no se convierten a número
    value: StrictInt
    is_x: StrictBool = False


class ScoreCard(BaseModel):
    """Tarjeta de puntuación enviada por un competidor"""

    id: str = Field(..., alias="_id")

    competitor_id: str
    competition_id: str

    shots: list[Shot]

    # Derivados de shots, guardados para no recalcular
    total_score: int
    x_count: int

    verification_status: VerificationStatus = "pending"
    submitted_at: datetime

    # Denormalizados desde la competición para filtrar rápido
    competition_type: CompetitionType
    category: Optional[str] = None  # prone | standing | benchrest ...

    verified_at: Optional[datetime] = None
    verification_notes: Optional[str] = None

    # Admin que cargó la tarjeta en nombre del competidor
    submitted_by: Optional[str] = None

    class Config:
        populate_by_name = True


class ScoreSubmission(BaseModel):
    """Datos para enviar una tarjeta"""

    competitor_id: str
    competition_id: str
    shots: list[Shot]


class AdminScoreSubmission(ScoreSubmission):
    """Tarjeta cargada por un admin; entra ya aprobada"""

    submitted_by: str
    notes: Optional[str] = None


class ScoreVerification(BaseModel):
    """Resultado de la revisión de un admin"""

    status: Literal["approved", "rejected", "flagged"]
    notes: Optional[str] = None


class ScoreCardResponse(BaseModel):
    """Tarjeta para devolver al cliente"""

    id: str
    competitor_id: str
    competition_id: str
    total_score: int
    x_count: int
    verification_status: VerificationStatus
    submitted_at: datetime
    competition_type: CompetitionType
    category: Optional[str] = None
    submitted_by: Optional[str] = None
