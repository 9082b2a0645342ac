from .competitor import Competitor
from .competition import Competition
from .score_card import Shot, ScoreCard, ScoreSubmission, AdminScoreSubmission, ScoreVerification
from .classification import ClassificationTier, ClassificationResult
from .leaderboard import LeaderboardEntry, LeaderboardFilter

__all__ = [
    "Competitor",
    "Competition",
    "Shot",
    "ScoreCard",
    "ScoreSubmission",
    "AdminScoreSubmission",
    "ScoreVerification",
    "ClassificationTier",
    "ClassificationResult",
    "LeaderboardEntry",
    "LeaderboardFilter",
]
