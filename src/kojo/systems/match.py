from esper import World

from kojo.events.bus import EventBus, EVENT_TILE_CLICK, EVENT_MATCH_FOUND, EVENT_NO_MATCH
from kojo.components.match_result import MatchResult
from kojo.systems.board_ops import detect_runs


class MatchSystem:
    """Turns tile clicks into match results."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        result = self.evaluate(row, col)
        if result:
            self.event_bus.emit(EVENT_MATCH_FOUND, result=result, positions=result.positions, size=result.cleared_count)
        else:
            self.event_bus.emit(EVENT_NO_MATCH, row=row, col=col)

    def evaluate(self, row: int, col: int) -> MatchResult:
        return detect_runs(self.world, row, col)
