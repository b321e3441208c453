from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from kojo.constants import LEADERBOARD_CAPACITY


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    name: str
    score: int


@dataclass(slots=True)
class Leaderboard:
    """Top-N entries sorted by score descending, at most one entry per name."""

    entries: Tuple[LeaderboardEntry, ...] = ()
    capacity: int = LEADERBOARD_CAPACITY
    loaded: bool = False

    def ranked(self) -> list[tuple[int, LeaderboardEntry]]:
        """Return ``(rank, entry)`` pairs with 1-based ranks."""
        return [(index + 1, entry) for index, entry in enumerate(self.entries)]

    def score_for(self, name: str) -> int | None:
        for entry in self.entries:
            if entry.name == name:
                return entry.score
        return None
