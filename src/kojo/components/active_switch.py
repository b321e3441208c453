from dataclasses import dataclass

@dataclass(slots=True)
class ActiveSwitch:
    """Per-cell occupancy flag.

    active: True if the cell currently holds a token; False if cleared/empty.
    Token information lives in a separate TileType component.
    """
    active: bool = True
