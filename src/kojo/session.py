"""Session wiring: one world, one bus, the puzzle systems and the score/leaderboard service."""
from __future__ import annotations

import random
from typing import Iterable, Optional

from kojo.components.game_state import Activity, GameState
from kojo.components.tile_types import Token
from kojo.constants import DEFAULT_PLAYER_NAME, GRID_SIZE, LEADERBOARD_CAPACITY
from kojo.events.bus import EventBus, EVENT_ACTIVITY_SELECTED, EVENT_TILE_CLICK
from kojo.persistence.stores import JsonFileStore, LeaderboardStore
from kojo.persistence.worker import PersistenceWorker
from kojo.systems.board import BoardSystem
from kojo.systems.leaderboard_system import LeaderboardSystem
from kojo.systems.match import MatchSystem
from kojo.systems.match_resolution import MatchResolutionSystem
from kojo.systems.score_system import ScoreSystem
from kojo.world import create_world


class GameSession:
    def __init__(
        self,
        store: Optional[LeaderboardStore] = None,
        *,
        player_name: str = DEFAULT_PLAYER_NAME,
        board_size: int = GRID_SIZE,
        palette: Optional[Iterable[Token]] = None,
        stable_start: bool = False,
        cascade: bool = False,
        leaderboard_capacity: int = LEADERBOARD_CAPACITY,
        write_retries: int = 0,
        rng: Optional[random.Random] = None,
    ):
        self.event_bus = EventBus()
        self.world = create_world(
            self.event_bus,
            player_name=player_name,
            palette=palette,
            leaderboard_capacity=leaderboard_capacity,
            rng=rng,
        )
        self.store = store if store is not None else JsonFileStore()
        self.worker = PersistenceWorker(self.store, retries=write_retries)
        # Score service first so it is subscribed before anything can publish points.
        self.score_system = ScoreSystem(self.world, self.event_bus)
        self.leaderboard_system = LeaderboardSystem(
            self.world,
            self.event_bus,
            self.worker,
            capacity=leaderboard_capacity,
        )
        self.board_system = BoardSystem(self.world, self.event_bus, board_size, rng=rng, stable=stable_start)
        self.match_system = MatchSystem(self.world, self.event_bus)
        self.match_resolution_system = MatchResolutionSystem(
            self.world,
            self.event_bus,
            self.score_system.submit,
            cascade=cascade,
            rng=rng,
        )
        self.event_bus.subscribe(EVENT_ACTIVITY_SELECTED, self._on_activity_selected)

    @property
    def total(self) -> int:
        return self.score_system.total

    @property
    def leaderboard(self):
        return self.leaderboard_system.entries

    @property
    def activity(self) -> Activity:
        for _, state in self.world.get_component(GameState):
            return state.activity
        raise RuntimeError("GameState not found")

    def click(self, row: int, col: int) -> None:
        self.event_bus.emit(EVENT_TILE_CLICK, row=row, col=col)

    def submit_score(self, delta: int, source: Activity) -> int:
        return self.score_system.submit(delta, source)

    def _on_activity_selected(self, sender, **kwargs):
        activity = kwargs.get("activity")
        if not isinstance(activity, Activity):
            return
        for _, state in self.world.get_component(GameState):
            state.activity = activity

    def close(self) -> None:
        """Wait for queued writes, then stop the persistence worker."""
        self.worker.shutdown(wait=True)

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
