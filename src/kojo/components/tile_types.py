from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List


class Token(Enum):
    """Palette values a board cell can hold."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"


@dataclass(slots=True)
class TileTypes:
    """Canonical token definitions stored on a single entity.

    This component lives alongside TileTypeRegistry (tag). ``palette`` is the ordered
    set of tokens drawn when filling or refilling the board.
    """
    palette: List[Token] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.palette:
            self.set_palette(self.palette)
        else:
            self.palette = list(Token)

    def spawnable_tokens(self) -> List[Token]:
        return list(self.palette)

    def set_palette(self, tokens: Iterable[Token]) -> None:
        # Preserve order while dropping duplicates.
        seen: set[Token] = set()
        filtered: List[Token] = []
        for token in tokens:
            if not isinstance(token, Token):
                raise ValueError(f"Unknown token '{token}'")
            if token not in seen:
                filtered.append(token)
                seen.add(token)
        if not filtered:
            raise ValueError("Palette must contain at least one token")
        self.palette = filtered
