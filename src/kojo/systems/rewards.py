"""Point formulas for every activity that feeds the shared score."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from kojo.constants import ATTEMPT_PENALTY, GUESS_BASE_REWARD, POINTS_PER_TILE, SHARE_BONUS


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


DIFFICULTY_MULTIPLIER = {
    Difficulty.EASY: Decimal("1"),
    Difficulty.MEDIUM: Decimal("1.5"),
    Difficulty.HARD: Decimal("2"),
}


def _check_count(value: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{label} must be a non-negative integer, got {value!r}")


def points_for_tiles(cleared_count: int) -> int:
    _check_count(cleared_count, "cleared_count")
    return cleared_count * POINTS_PER_TILE


def guess_reward(attempts: int) -> int:
    """Reward for a correct guess after ``attempts`` earlier tries."""
    _check_count(attempts, "attempts")
    return max(0, GUESS_BASE_REWARD - attempts * ATTEMPT_PENALTY)


def color_reward(attempts: int, difficulty: Difficulty = Difficulty.MEDIUM) -> int:
    base = Decimal(guess_reward(attempts))
    scaled = base * DIFFICULTY_MULTIPLIER[difficulty]
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def share_bonus() -> int:
    return SHARE_BONUS
