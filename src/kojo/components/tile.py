from dataclasses import dataclass

from kojo.components.tile_types import Token

@dataclass(slots=True)
class TileType:
    """Per-cell token assignment (no color data).

    Empty state is handled by ActiveSwitch; the token of an inactive cell is stale.
    Canonical color lookup resides in the singleton entity with TileTypeRegistry + TileTypes.
    """
    token: Token
