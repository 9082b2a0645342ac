from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Competitor(BaseModel):
    id: str = Field(..., alias="_id")
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    # Cache de la clasificación calculada (se puede recalcular siempre
    # desde las tarjetas aprobadas)
    classification: Optional[str] = None
    classification_updated_at: Optional[datetime] = None

    # Asignada a mano por un admin, tiene prioridad al mostrar
    classification_override: Optional[str] = None

    class Config:
        populate_by_name = True
