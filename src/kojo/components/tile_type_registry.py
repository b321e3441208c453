from dataclasses import dataclass

@dataclass(slots=True)
class TileTypeRegistry:
    """Empty tag component marking the single entity that stores canonical token definitions.

    The same entity also has a TileTypes component with the palette and token colors.
    """
    pass
