import random
from typing import Iterable, Optional

from esper import World

from kojo.components.board import Board
from kojo.components.tile_types import Token
from kojo.constants import GRID_SIZE
from kojo.events.bus import EventBus, EVENT_BOARD_RESET_REQUEST, EVENT_BOARD_CHANGED
from kojo.systems.board_ops import board_dimensions, create_board, fill_board, get_tile, set_tile


class BoardSystem:
    """Owns the single board entity and its cell entities."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        size: int = GRID_SIZE,
        *,
        palette: Optional[Iterable[Token]] = None,
        rng: Optional[random.Random] = None,
        stable: bool = False,
    ):
        self.world = world
        self.event_bus = event_bus
        self.rng = rng
        self.stable = stable
        self.board_entity = create_board(world, size, palette, rng=rng, stable=stable)
        self.event_bus.subscribe(EVENT_BOARD_RESET_REQUEST, self.on_reset_request)

    @property
    def size(self) -> int:
        return self.world.component_for_entity(self.board_entity, Board).size

    def get(self, row: int, col: int) -> Optional[Token]:
        return get_tile(self.world, row, col)

    def set(self, row: int, col: int, value: Optional[Token]) -> None:
        set_tile(self.world, row, col, value)

    def on_reset_request(self, sender, **kwargs):
        if board_dimensions(self.world) is None:
            return
        positions = fill_board(self.world, rng=self.rng, stable=self.stable)
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason="reset", positions=positions)
