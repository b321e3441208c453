from __future__ import annotations

import logging
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Optional

from esper import World

from kojo.components.leaderboard import Leaderboard
from kojo.components.player import Player
from kojo.constants import LEADERBOARD_CAPACITY, LEADERBOARD_KEY
from kojo.events.bus import (
    EVENT_LEADERBOARD_LOADED,
    EVENT_LEADERBOARD_UPDATED,
    EVENT_SCORE_CHANGED,
    EventBus,
)
from kojo.persistence.worker import PersistenceWorker
from kojo.systems.leaderboard_ops import (
    Entries,
    deserialize_leaderboard,
    merge_leaderboard,
    normalize_leaderboard,
    serialize_leaderboard,
)

logger = logging.getLogger(__name__)


class LeaderboardSystem:
    """Keeps the in-memory top-N leaderboard and mirrors it to storage.

    The stored leaderboard is read once in the background and folded in when it arrives.
    Every merge enqueues a write of the full leaderboard on the persistence worker and
    returns without waiting for it.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        worker: PersistenceWorker,
        *,
        key: str = LEADERBOARD_KEY,
        capacity: int = LEADERBOARD_CAPACITY,
        load_existing: bool = True,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.worker = worker
        self.key = key
        self._board_entity = self._ensure_leaderboard_entity(capacity)
        self._last_write: Optional[Future] = None
        self._pending_load: Optional[Future] = None
        self._merged_before_load = False

        self.event_bus.subscribe(EVENT_SCORE_CHANGED, self._on_score_changed)

        if load_existing:
            self.request_load()

    def _ensure_leaderboard_entity(self, capacity: int) -> int:
        existing = list(self.world.get_component(Leaderboard))
        if existing:
            return existing[0][0]
        return self.world.create_entity(Leaderboard(capacity=capacity))

    def _leaderboard(self) -> Leaderboard:
        return self.world.component_for_entity(self._board_entity, Leaderboard)

    @property
    def entries(self) -> Entries:
        self._fold_pending_load()
        return self._leaderboard().entries

    @property
    def loaded(self) -> bool:
        self._fold_pending_load()
        return self._leaderboard().loaded

    @property
    def last_write(self) -> Optional[Future]:
        return self._last_write

    def player_name(self) -> str:
        for _, player in self.world.get_component(Player):
            return player.name
        raise RuntimeError("Player not found")

    def request_load(self) -> Optional[Future]:
        """Queue the one-time read of the stored leaderboard without waiting for it.

        The result is folded in on the next access, merge or ``load_leaderboard`` call, always on
        the caller's thread.
        """
        if self._pending_load is not None or self._leaderboard().loaded:
            return self._pending_load
        try:
            self._pending_load = self.worker.submit_read(self.key)
        except RuntimeError:
            logger.warning("Leaderboard load skipped: persistence worker is shut down")
            return None
        return self._pending_load

    def load_leaderboard(self, timeout: Optional[float] = None) -> Entries:
        """Wait up to ``timeout`` seconds for the stored leaderboard and fold it in.

        A read that has not finished in time leaves the in-memory entries as they are; it is
        still folded in later once it completes.
        """
        self.request_load()
        pending = self._pending_load
        if pending is not None:
            try:
                pending.result(timeout=timeout)
            except FutureTimeout:
                logger.warning("Leaderboard load still pending after %ss", timeout)
        self._fold_pending_load()
        return self._leaderboard().entries

    def _fold_pending_load(self) -> None:
        pending = self._pending_load
        if pending is None or not pending.done():
            return
        self._pending_load = None
        board = self._leaderboard()
        stored = deserialize_leaderboard(pending.result(), capacity=board.capacity)
        before = board.entries
        # Scores merged before the load finished stay; stored entries fold in around them.
        board.entries = normalize_leaderboard(before + stored, capacity=board.capacity)
        board.loaded = True
        logger.debug("Loaded %d leaderboard entries", len(board.entries))
        self.event_bus.emit(EVENT_LEADERBOARD_LOADED, entries=board.entries)
        if self._merged_before_load:
            # Writes issued before the load carried only the in-session entries.
            self.persist()
        self._merged_before_load = False

    def merge(self, name: str, score: int) -> Entries:
        self._fold_pending_load()
        board = self._leaderboard()
        board.entries = merge_leaderboard(board.entries, name, score, capacity=board.capacity)
        if not board.loaded:
            self._merged_before_load = True
        self.event_bus.emit(EVENT_LEADERBOARD_UPDATED, entries=board.entries, player=name, score=score)
        self.persist()
        return board.entries

    def persist(self) -> Optional[Future]:
        """Enqueue a write of the current leaderboard; failures are handled by the worker."""
        payload = serialize_leaderboard(self._leaderboard().entries)
        try:
            self._last_write = self.worker.submit_write(self.key, payload)
        except RuntimeError:
            logger.warning("Leaderboard write dropped: persistence worker is shut down")
            return None
        return self._last_write

    # Event handlers -----------------------------------------------------

    def _on_score_changed(self, sender, **payload) -> None:
        total = payload.get("total")
        if total is None:
            return
        self.merge(self.player_name(), total)
