"""Game state resource describing the active activity."""
from dataclasses import dataclass
from enum import Enum


class Activity(Enum):
    """Activities that share the running score. Also used as score source tags."""
    COLOR = "color"
    NUMBER = "number"
    WORD = "word"
    TILES = "tiles"
    CHAT = "chat"
    SHARE = "share"


@dataclass
class GameState:
    """Singleton component storing the currently selected activity tab."""
    activity: Activity = Activity.COLOR
