from pydantic import BaseModel


class ClassificationTier(BaseModel):
    """Nivel de clasificación con sus umbrales mínimos"""

    name: str
    min_average_score: float
    min_average_x_count: float


class ClassificationResult(BaseModel):
    """Resultado de clasificar a un competidor"""

    competitor_id: str

    tier: str  # Nivel real, sin prefijo
    provisional: bool
    label: str  # "Provisional Gold" o "Gold"

    sample_count: int  # Tamaño del conjunto candidato (últimas N tarjetas)
    qualifying_count: int  # Tarjetas usadas para el promedio

    average_score: float
    average_x_count: float
