from dataclasses import dataclass

@dataclass(slots=True)
class Board:
    """Square grid dimensions. Row 0 is the top row; gravity pulls toward row ``size - 1``."""
    size: int

    @property
    def rows(self) -> int:
        return self.size

    @property
    def cols(self) -> int:
        return self.size
