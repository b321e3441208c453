import random
from typing import Iterable

from esper import World
from .events.bus import EventBus
from kojo.components.game_state import Activity, GameState
from kojo.components.leaderboard import Leaderboard
from kojo.components.player import Player
from kojo.components.running_total import RunningTotal
from kojo.components.tile_type_registry import TileTypeRegistry
from kojo.components.tile_types import TileTypes, Token
from kojo.constants import DEFAULT_PLAYER_NAME, LEADERBOARD_CAPACITY


def create_world(
    event_bus: EventBus,
    initial_activity: Activity = Activity.COLOR,
    *,
    player_name: str = DEFAULT_PLAYER_NAME,
    palette: Iterable[Token] | None = None,
    leaderboard_capacity: int = LEADERBOARD_CAPACITY,
    rng: random.Random | None = None,
) -> World:
    """Create a session world holding the shared singletons.

    The board itself is created by BoardSystem so its size and fill mode stay configurable.
    """
    if not player_name:
        raise ValueError("Player name must be a non-empty string")
    world = World()
    setattr(world, "random", rng or random.Random())

    # Session-wide state resources.
    world.create_entity(GameState(activity=initial_activity))
    world.create_entity(Player(name=player_name), RunningTotal())
    world.create_entity(Leaderboard(capacity=leaderboard_capacity))

    # Create single registry entity with canonical tokens
    tile_types = TileTypes()
    if palette is not None:
        tile_types.set_palette(palette)
    world.create_entity(TileTypeRegistry(), tile_types)
    return world
