from __future__ import annotations

import json
import time

from kojo.components.game_state import Activity
from kojo.components.leaderboard import Leaderboard, LeaderboardEntry as E
from kojo.events.bus import EventBus, EVENT_LEADERBOARD_LOADED, EVENT_LEADERBOARD_UPDATED
from kojo.persistence import InMemoryStore, JsonFileStore, PersistenceWorker
from kojo.systems.leaderboard_system import LeaderboardSystem
from kojo.systems.score_system import ScoreSystem
from kojo.world import create_world
from tests.helpers import FailingStore, StalledStore


def _stored(store) -> list:
    return json.loads(store.read("leaderboard"))


def test_loads_existing_leaderboard_at_start():
    store = InMemoryStore({"leaderboard": json.dumps([{"name": "A", "score": 100}, {"name": "B", "score": 90}])})
    bus = EventBus(); world = create_world(bus)
    loaded = {}
    bus.subscribe(EVENT_LEADERBOARD_LOADED, lambda s, **k: loaded.update(k))
    worker = PersistenceWorker(store)
    system = LeaderboardSystem(world, bus, worker)
    system.load_leaderboard(timeout=5)
    assert system.entries == (E("A", 100), E("B", 90))
    assert loaded['entries'] == system.entries
    assert list(world.get_component(Leaderboard))[0][1].loaded is True
    worker.shutdown()


def test_missing_or_corrupt_storage_starts_empty():
    for store in (InMemoryStore(), InMemoryStore({"leaderboard": "{oops"}), FailingStore()):
        bus = EventBus(); world = create_world(bus)
        worker = PersistenceWorker(store)
        system = LeaderboardSystem(world, bus, worker)
        system.load_leaderboard(timeout=5)
        assert system.entries == ()
        worker.shutdown()


def test_score_change_merges_player_total_and_persists():
    store = InMemoryStore({"leaderboard": json.dumps([{"name": "A", "score": 100}, {"name": "B", "score": 90}])})
    bus = EventBus(); world = create_world(bus, player_name="C")
    worker = PersistenceWorker(store)
    scores = ScoreSystem(world, bus)
    system = LeaderboardSystem(world, bus, worker)
    updated = {}
    system.load_leaderboard(timeout=5)
    bus.subscribe(EVENT_LEADERBOARD_UPDATED, lambda s, **k: updated.update(k))

    scores.submit(60, Activity.TILES)
    scores.submit(35, Activity.WORD)

    assert system.entries == (E("A", 100), E("C", 95), E("B", 90))
    assert updated['player'] == "C" and updated['score'] == 95
    worker.flush()
    assert _stored(store) == [
        {"name": "A", "score": 100},
        {"name": "C", "score": 95},
        {"name": "B", "score": 90},
    ]
    worker.shutdown()


def test_write_failure_keeps_in_memory_state():
    store = FailingStore(fail_reads=False)
    bus = EventBus(); world = create_world(bus, player_name="Solo")
    worker = PersistenceWorker(store)
    scores = ScoreSystem(world, bus)
    system = LeaderboardSystem(world, bus, worker)
    scores.submit(40, Activity.COLOR)
    assert system.last_write.result(timeout=5) is False
    assert system.entries == (E("Solo", 40),)
    assert scores.total == 40
    worker.shutdown()


def test_skip_load_then_explicit_merge():
    store = InMemoryStore({"leaderboard": json.dumps([{"name": "Old", "score": 500}])})
    bus = EventBus(); world = create_world(bus)
    worker = PersistenceWorker(store)
    system = LeaderboardSystem(world, bus, worker, load_existing=False)
    system.merge("New", 10)
    worker.flush()
    # Without a load the stored entries are superseded by the in-memory mirror.
    assert _stored(store) == [{"name": "New", "score": 10}]
    worker.shutdown()


def test_leaderboard_survives_across_sessions(tmp_path):
    first_bus = EventBus(); first_world = create_world(first_bus, player_name="Ada")
    first_worker = PersistenceWorker(JsonFileStore(tmp_path))
    ScoreSystem(first_world, first_bus).submit(120, Activity.NUMBER)
    LeaderboardSystem(first_world, first_bus, first_worker).merge("Ada", 120)
    first_worker.shutdown()

    second_bus = EventBus(); second_world = create_world(second_bus, player_name="Bob")
    second_worker = PersistenceWorker(JsonFileStore(tmp_path))
    second = LeaderboardSystem(second_world, second_bus, second_worker)
    second.load_leaderboard(timeout=5)
    assert second.entries == (E("Ada", 120),)
    ScoreSystem(second_world, second_bus).submit(130, Activity.COLOR)
    second_worker.flush()
    assert second.entries == (E("Bob", 130), E("Ada", 120))
    second_worker.shutdown()


def test_capacity_is_configurable():
    bus = EventBus(); world = create_world(bus, leaderboard_capacity=3)
    worker = PersistenceWorker(InMemoryStore())
    system = LeaderboardSystem(world, bus, worker)
    for name, score in [("A", 5), ("B", 9), ("C", 7), ("D", 8)]:
        system.merge(name, score)
    assert system.entries == (E("B", 9), E("D", 8), E("C", 7))
    worker.shutdown()


def test_ranked_view_and_score_lookup():
    bus = EventBus(); world = create_world(bus)
    worker = PersistenceWorker(InMemoryStore())
    system = LeaderboardSystem(world, bus, worker)
    system.merge("A", 100)
    system.merge("B", 90)
    board = list(world.get_component(Leaderboard))[0][1]
    assert board.ranked() == [(1, E("A", 100)), (2, E("B", 90))]
    assert board.score_for("B") == 90
    assert board.score_for("Nobody") is None
    worker.shutdown()


def test_stalled_read_does_not_block_construction():
    store = StalledStore(json.dumps([{"name": "A", "score": 100}]))
    bus = EventBus(); world = create_world(bus, player_name="C")
    worker = PersistenceWorker(store)
    scores = ScoreSystem(world, bus)
    started = time.monotonic()
    system = LeaderboardSystem(world, bus, worker)
    assert time.monotonic() - started < 0.5
    assert store.read_started.wait(timeout=5)

    assert system.load_leaderboard(timeout=0.05) == ()
    assert system.loaded is False
    scores.submit(40, Activity.TILES)
    assert system.entries == (E("C", 40),)

    store.release.set()
    worker.flush()
    assert system.entries == (E("A", 100), E("C", 40))
    assert system.loaded is True
    worker.flush()
    assert _stored(store) == [{"name": "A", "score": 100}, {"name": "C", "score": 40}]
    worker.shutdown()


def test_load_happens_once():
    store = FailingStore(json.dumps([{"name": "A", "score": 1}]), fail_reads=False)
    bus = EventBus(); world = create_world(bus)
    worker = PersistenceWorker(store)
    system = LeaderboardSystem(world, bus, worker)
    system.load_leaderboard(timeout=5)
    system.load_leaderboard(timeout=5)
    assert store.read_calls == 1
    worker.shutdown()


def test_merge_after_shutdown_keeps_memory_and_logs(caplog):
    bus = EventBus(); world = create_world(bus)
    worker = PersistenceWorker(InMemoryStore())
    system = LeaderboardSystem(world, bus, worker, load_existing=False)
    worker.shutdown()
    with caplog.at_level("WARNING", logger="kojo.systems.leaderboard_system"):
        assert system.merge("Late", 5) == (E("Late", 5),)
    assert system.persist() is None
    assert "shut down" in caplog.text
