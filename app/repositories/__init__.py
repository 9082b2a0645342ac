from .score_card_repository import ScoreCardRepository
from .competitor_repository import CompetitorRepository
from .competition_repository import CompetitionRepository

__all__ = [
    "ScoreCardRepository",
    "CompetitorRepository",
    "CompetitionRepository",
]
