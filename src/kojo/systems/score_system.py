from typing import Optional, Protocol

from esper import World

from kojo.components.game_state import Activity
from kojo.components.running_total import RunningTotal
from kojo.events.bus import EventBus, EVENT_SCORE_EVENT, EVENT_SCORE_CHANGED
from kojo.systems.leaderboard_ops import apply_score


class ScoreSink(Protocol):
    """Anything a minigame can hand its point deltas to."""

    def __call__(self, delta: int, source: Activity) -> int: ...


def get_or_create_running_total(world: World) -> RunningTotal:
    """Return the shared RunningTotal component, creating it if absent."""
    existing = list(world.get_component(RunningTotal))
    if existing:
        return existing[0][1]
    world.create_entity(RunningTotal())
    return list(world.get_component(RunningTotal))[0][1]


class ScoreSystem:
    """Owns the session's running total. ``submit`` is the score sink every activity uses."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self._total = get_or_create_running_total(world)
        self.event_bus.subscribe(EVENT_SCORE_EVENT, self.on_score_event)

    @property
    def total(self) -> int:
        return self._total.value

    def submit(self, delta: int, source: Activity = Activity.TILES) -> int:
        """Add ``delta`` points from ``source`` and return the new total.

        A zero delta changes nothing and publishes nothing.
        """
        new_total = apply_score(self._total.value, delta)
        if delta == 0:
            return new_total
        self._total.value = new_total
        self._total.by_source[source] = self._total.subtotal(source) + delta
        self.event_bus.emit(EVENT_SCORE_CHANGED, total=new_total, delta=delta, source=source)
        return new_total

    __call__ = submit

    def on_score_event(self, sender, **kwargs):
        delta: Optional[int] = kwargs.get('delta')
        if delta is None:
            return
        self.submit(delta, kwargs.get('source', Activity.TILES))
