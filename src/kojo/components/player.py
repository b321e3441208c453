from dataclasses import dataclass

from kojo.constants import DEFAULT_PLAYER_NAME

@dataclass(slots=True)
class Player:
    """Display name used when the session's total is merged into the leaderboard."""
    name: str = DEFAULT_PLAYER_NAME
