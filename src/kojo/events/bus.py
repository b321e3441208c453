from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so systems that are not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, /, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_ACTIVITY_SELECTED = "activity_selected"      # payload: activity=Activity


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_MATCH_FOUND = "match_found"                  # payload: result=MatchResult, positions=[(r,c),...], size=int
EVENT_NO_MATCH = "no_match"                        # payload: row, col
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], tokens=[(r,c,Token),...]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[GravityMove,...], columns=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int
EVENT_BOARD_RESET_REQUEST = "board_reset_request"  # payload: None
EVENT_BOARD_CHANGED = "board_changed"              # payload: reason=str, positions=list[(r,c)]


# ============================================================================
# SCORE & LEADERBOARD
# ============================================================================
EVENT_SCORE_EVENT = "score_event"                  # payload: delta=int, source=Activity
EVENT_SCORE_CHANGED = "score_changed"              # payload: total=int, delta=int, source=Activity
EVENT_LEADERBOARD_LOADED = "leaderboard_loaded"    # payload: entries=tuple[LeaderboardEntry,...]
EVENT_LEADERBOARD_UPDATED = "leaderboard_updated"  # payload: entries=tuple[LeaderboardEntry,...], player=str, score=int
