import logging
import random
from typing import List, Optional, Tuple

from esper import World

from kojo.components.game_state import Activity
from kojo.components.match_result import MatchResult
from kojo.constants import MAX_CASCADE_DEPTH
from kojo.events.bus import (EventBus, EVENT_MATCH_FOUND, EVENT_MATCH_CLEARED, EVENT_GRAVITY_APPLIED,
                             EVENT_REFILL_COMPLETED, EVENT_CASCADE_STEP, EVENT_CASCADE_COMPLETE,
                             EVENT_SCORE_EVENT)
from kojo.systems.board_ops import ResolveOutcome, find_all_matches, resolve
from kojo.systems.rewards import points_for_tiles
from kojo.systems.score_system import ScoreSink

logger = logging.getLogger(__name__)


class MatchResolutionSystem:
    """Clears matched cells, applies gravity and refill, and reports the points earned.

    Points go to ``score_sink`` when one is given, otherwise they are published as
    ``EVENT_SCORE_EVENT`` for whichever ScoreSystem listens on the bus.

    By default one click resolves exactly one clear/compact/refill pass; runs created by
    the refill stay on the board. With ``cascade=True`` those runs are cleared and scored
    too, until the board is stable or ``max_depth`` passes have run.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        score_sink: Optional[ScoreSink] = None,
        *,
        cascade: bool = False,
        max_depth: int = MAX_CASCADE_DEPTH,
        rng: Optional[random.Random] = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.score_sink = score_sink
        self.cascade = cascade
        self.max_depth = max_depth
        self.rng = rng
        self.event_bus.subscribe(EVENT_MATCH_FOUND, self.on_match_found)

    def on_match_found(self, sender, **kwargs):
        result: Optional[MatchResult] = kwargs.get('result')
        if result is None:
            return
        self.resolve_match(result)

    def resolve_match(self, result: MatchResult) -> int:
        """Resolve one click. Returns the total number of cells cleared, cascades included."""
        outcome = self._resolve_step(result.positions)
        if outcome.cleared_count == 0:
            return 0
        total_cleared = outcome.cleared_count
        if self.cascade:
            total_cleared += self._run_cascade()
        return total_cleared

    def _resolve_step(self, positions: List[Tuple[int, int]]) -> ResolveOutcome:
        outcome = resolve(self.world, positions, rng=self.rng)
        if outcome.cleared_count == 0:
            return outcome
        self.event_bus.emit(EVENT_MATCH_CLEARED, positions=outcome.cleared, tokens=outcome.tokens)
        columns = len({move.source[1] for move in outcome.moves})
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=outcome.moves, columns=columns)
        if outcome.new_tiles:
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=outcome.new_tiles)
        logger.debug("Cleared %d tiles, %d gravity moves", outcome.cleared_count, len(outcome.moves))
        self._award(outcome.cleared_count)
        return outcome

    def _run_cascade(self) -> int:
        depth = 0
        cleared = 0
        matches = find_all_matches(self.world)
        while matches and depth < self.max_depth:
            depth += 1
            flat_positions = sorted({pos for group in matches for pos in group})
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=flat_positions)
            cleared += self._resolve_step(flat_positions).cleared_count
            matches = find_all_matches(self.world)
        if matches:
            logger.warning("Cascade stopped at depth %d with runs still on the board", depth)
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
        return cleared

    def _award(self, cleared_count: int) -> None:
        points = points_for_tiles(cleared_count)
        if points <= 0:
            return
        if self.score_sink is not None:
            self.score_sink(points, Activity.TILES)
        else:
            self.event_bus.emit(EVENT_SCORE_EVENT, delta=points, source=Activity.TILES)
