"""
ScoreCard validator - checks a raw shot submission before it is stored.

Pure and local: no database access, no side effects.
"""

from pydantic import BaseModel

from app.models.score_card import Shot


MAX_SHOT_VALUE = 10


class ScoreCardValidationError(Exception):
    """Base exception for malformed score cards."""
    pass


class ShotCountMismatch(ScoreCardValidationError):
    """Raised when the card does not have the competition's shot count."""
    pass


class ShotValueOutOfRange(ScoreCardValidationError):
    """Raised when a shot value is outside 0-10."""
    pass


class InvalidXFlag(ScoreCardValidationError):
    """Raised when a shot is marked X but is not a 10."""
    pass


class ValidatedCard(BaseModel):
    """Shots that passed validation plus their derived totals."""

    shots: list[Shot]
    total_score: int
    x_count: int


def validate_shots(shots: list[Shot], required_shot_count: int) -> ValidatedCard:
    """
    Validate a shot list and derive total score and X-count.

    Raises ShotCountMismatch, ShotValueOutOfRange or InvalidXFlag.
    """
    if len(shots) != required_shot_count:
        raise ShotCountMismatch(
            f"Invalid number of shots: expected {required_shot_count}, received {len(shots)}"
        )

    for idx, shot in enumerate(shots, start=1):
        if not 0 <= shot.value <= MAX_SHOT_VALUE:
            raise ShotValueOutOfRange(
                f"Shot {idx} has value {shot.value}; values must be between 0 and {MAX_SHOT_VALUE}"
            )
        if shot.is_x and shot.value != MAX_SHOT_VALUE:
            raise InvalidXFlag(
                f"Shot {idx} is marked as X but scores {shot.value}"
            )

    return ValidatedCard(
        shots=list(shots),
        total_score=sum(shot.value for shot in shots),
        x_count=sum(1 for shot in shots if shot.is_x),
    )
