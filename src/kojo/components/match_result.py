from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from kojo.components.tile_types import Token
from kojo.constants import MIN_RUN_LENGTH

Position = Tuple[int, int]
Span = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Runs through one clicked cell.

    ``horizontal`` is the inclusive column span and ``vertical`` the inclusive row span of
    equal tokens through ``(row, col)``. A span shorter than ``min_length`` contributes no
    cleared positions. ``token`` is None when the clicked cell was empty.
    """

    row: int
    col: int
    token: Optional[Token]
    horizontal: Span
    vertical: Span
    min_length: int = MIN_RUN_LENGTH

    @staticmethod
    def empty(row: int, col: int) -> "MatchResult":
        return MatchResult(row=row, col=col, token=None, horizontal=(col, col), vertical=(row, row))

    @property
    def horizontal_length(self) -> int:
        return self.horizontal[1] - self.horizontal[0] + 1

    @property
    def vertical_length(self) -> int:
        return self.vertical[1] - self.vertical[0] + 1

    @property
    def horizontal_positions(self) -> List[Position]:
        if self.token is None or self.horizontal_length < self.min_length:
            return []
        return [(self.row, c) for c in range(self.horizontal[0], self.horizontal[1] + 1)]

    @property
    def vertical_positions(self) -> List[Position]:
        if self.token is None or self.vertical_length < self.min_length:
            return []
        return [(r, self.col) for r in range(self.vertical[0], self.vertical[1] + 1)]

    @property
    def positions(self) -> List[Position]:
        # The clicked cell sits on both axes; count it once.
        return sorted(set(self.horizontal_positions) | set(self.vertical_positions))

    @property
    def cleared_count(self) -> int:
        return len(self.positions)

    def __bool__(self) -> bool:
        return self.cleared_count > 0
