from kojo.events.bus import EventBus, EVENT_TILE_CLICK, EVENT_MATCH_FOUND, EVENT_NO_MATCH
from kojo.world import create_world
from kojo.systems.board import BoardSystem
from kojo.systems.board_ops import detect_runs
from kojo.systems.match import MatchSystem
from kojo.components.tile_types import Token
from tests.helpers import layout_board, striped_rows


def _world_with(rows):
    bus = EventBus(); world = create_world(bus)
    BoardSystem(world, bus, len(rows))
    layout_board(world, rows)
    return bus, world


def test_horizontal_run_through_clicked_cell():
    rows = striped_rows()
    rows[3] = "RRRBGYPB"
    bus, world = _world_with(rows)
    result = detect_runs(world, 3, 1)
    assert result.token == Token.RED
    assert result.horizontal == (0, 2)
    assert result.horizontal_positions == [(3, 0), (3, 1), (3, 2)]
    assert result.vertical_positions == []
    assert result.cleared_count == 3


def test_vertical_run_counts_only_from_three():
    rows = striped_rows(5)
    for r in (1, 2, 3):
        rows[r] = rows[r][:2] + 'Y' + rows[r][3:]
    rows[0] = rows[0][:2] + 'R' + rows[0][3:]
    rows[4] = rows[4][:2] + 'B' + rows[4][3:]
    bus, world = _world_with(rows)
    result = detect_runs(world, 3, 2)
    assert result.vertical == (1, 3)
    assert result.positions == [(1, 2), (2, 2), (3, 2)]


def test_pair_is_not_a_match():
    rows = striped_rows()
    rows[0] = "GG" + rows[0][2:].replace('G', 'Y')
    bus, world = _world_with(rows)
    result = detect_runs(world, 0, 0)
    assert result.horizontal == (0, 1)
    assert result.cleared_count == 0
    assert not result


def test_cross_shape_counts_shared_cell_once():
    rows = [
        "BGYPB",
        "YPRGY",
        "RRRRP",
        "GBRYG",
        "PYRBP",
    ]
    bus, world = _world_with(rows)
    result = detect_runs(world, 2, 2)
    assert result.horizontal == (0, 3)
    assert result.vertical == (1, 4)
    # 4 horizontal + 4 vertical - the shared clicked cell
    assert result.cleared_count == 7
    assert (2, 2) in result.positions


def test_both_axes_use_original_clicked_token():
    rows = [
        "BBBPG",
        "BGYRY",
        "BYPGP",
        "GPRYB",
        "YRGBG",
    ]
    bus, world = _world_with(rows)
    result = detect_runs(world, 0, 0)
    assert result.horizontal_positions == [(0, 0), (0, 1), (0, 2)]
    assert result.vertical_positions == [(0, 0), (1, 0), (2, 0)]
    assert result.cleared_count == 5


def test_empty_cell_yields_empty_result():
    rows = striped_rows(4)
    rows[0] = "." + rows[0][1:]
    bus, world = _world_with(rows)
    result = detect_runs(world, 0, 0)
    assert result.token is None
    assert result.positions == []


def test_match_system_emits_found_or_no_match():
    rows = striped_rows()
    rows[3] = "RRRBGYPB"
    bus, world = _world_with(rows)
    MatchSystem(world, bus)
    found = {}
    missed = {}
    bus.subscribe(EVENT_MATCH_FOUND, lambda s, **k: found.update(k))
    bus.subscribe(EVENT_NO_MATCH, lambda s, **k: missed.update(k))

    bus.emit(EVENT_TILE_CLICK, row=0, col=0)
    assert missed == {'row': 0, 'col': 0}
    assert not found

    bus.emit(EVENT_TILE_CLICK, row=3, col=1)
    assert found['positions'] == [(3, 0), (3, 1), (3, 2)]
    assert found['size'] == 3
    assert found['result'].horizontal == (0, 2)
