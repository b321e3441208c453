from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from esper import World

from kojo.components.active_switch import ActiveSwitch
from kojo.components.board import Board
from kojo.components.board_position import BoardPosition
from kojo.components.match_result import MatchResult
from kojo.components.tile import TileType
from kojo.components.tile_type_registry import TileTypeRegistry
from kojo.components.tile_types import Token, TileTypes
from kojo.constants import GRID_SIZE, MIN_RUN_LENGTH

Position = Tuple[int, int]
TokenEntry = Tuple[int, int, Token]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    token: Token


@dataclass(slots=True)
class ResolveOutcome:
    cleared: List[Position] = field(default_factory=list)
    tokens: List[TokenEntry] = field(default_factory=list)
    moves: List[GravityMove] = field(default_factory=list)
    new_tiles: List[Position] = field(default_factory=list)

    @property
    def cleared_count(self) -> int:
        return len(self.cleared)


def get_tile_registry(world: World) -> TileTypes:
    for entity, _ in world.get_component(TileTypeRegistry):
        return world.component_for_entity(entity, TileTypes)
    raise RuntimeError("TileTypes definitions not found")


def ensure_tile_registry(world: World, palette: Iterable[Token] | None = None) -> TileTypes:
    """Return the token registry, creating it with ``palette`` when absent."""
    try:
        registry = get_tile_registry(world)
    except RuntimeError:
        registry = TileTypes()
        world.create_entity(TileTypeRegistry(), registry)
    if palette is not None:
        registry.set_palette(palette)
    return registry


def board_dimensions(world: World) -> int | None:
    for _, board in world.get_component(Board):
        return board.size
    return None


def _rng_for(world: World, rng: random.Random | None) -> random.Random:
    candidate = rng or getattr(world, "random", None)
    if isinstance(candidate, random.Random):
        return candidate
    return random.Random()


def create_board(
    world: World,
    size: int = GRID_SIZE,
    palette: Iterable[Token] | None = None,
    *,
    rng: random.Random | None = None,
    stable: bool = False,
) -> int:
    """Create the board entity and one entity per cell, filled with random palette tokens.

    Draws are independent and uniform, so the starting board may already contain runs.
    With ``stable=True`` a token that would complete a horizontal or vertical run of three
    is excluded while filling.
    """
    if size < 1:
        raise ValueError(f"Board size must be positive, got {size}")
    if board_dimensions(world) is not None:
        raise RuntimeError("Board already exists")
    registry = ensure_tile_registry(world, palette)
    rng = _rng_for(world, rng)
    board_entity = world.create_entity(Board(size=size))
    layout = _draw_layout(size, registry.spawnable_tokens(), rng, stable=stable)
    for r in range(size):
        for c in range(size):
            world.create_entity(
                BoardPosition(row=r, col=c),
                TileType(token=layout[r][c]),
                ActiveSwitch(active=True),
            )
    return board_entity


def _draw_layout(size: int, choices: List[Token], rng: random.Random, *, stable: bool) -> List[List[Token]]:
    layout: List[List[Token]] = []
    for row in range(size):
        row_values: List[Token] = []
        for col in range(size):
            available = list(choices)
            if stable:
                # Prevent horizontal triple: if last two cells share a token, exclude it.
                if col >= 2:
                    left1 = row_values[col - 1]
                    left2 = row_values[col - 2]
                    if left1 == left2:
                        available = [t for t in available if t != left1]
                # Prevent vertical triple the same way using the two rows above.
                if row >= 2:
                    up1 = layout[row - 1][col]
                    up2 = layout[row - 2][col]
                    if up1 == up2:
                        available = [t for t in available if t != up1]
                if not available:
                    available = list(choices)
            row_values.append(rng.choice(available))
        layout.append(row_values)
    return layout


def fill_board(world: World, *, rng: random.Random | None = None, stable: bool = False) -> List[Position]:
    """Redraw every cell of an existing board in place."""
    size = board_dimensions(world)
    if size is None:
        return []
    registry = get_tile_registry(world)
    layout = _draw_layout(size, registry.spawnable_tokens(), _rng_for(world, rng), stable=stable)
    positions: List[Position] = []
    for r in range(size):
        for c in range(size):
            set_tile(world, r, c, layout[r][c])
            positions.append((r, c))
    return positions


def _check_bounds(world: World, row: int, col: int) -> None:
    size = board_dimensions(world)
    if size is None:
        raise RuntimeError("Board not found")
    if not (0 <= row < size and 0 <= col < size):
        raise ValueError(f"Cell ({row}, {col}) is outside the {size}x{size} board")


def get_entity_at(world: World, row: int, col: int) -> int | None:
    for entity, position in world.get_component(BoardPosition):
        if position.row == row and position.col == col:
            return entity
    return None


def get_tile(world: World, row: int, col: int) -> Optional[Token]:
    """Return the token at ``(row, col)`` or None when the cell is empty."""
    _check_bounds(world, row, col)
    entity = get_entity_at(world, row, col)
    if entity is None:
        return None
    if not world.component_for_entity(entity, ActiveSwitch).active:
        return None
    return world.component_for_entity(entity, TileType).token


def set_tile(world: World, row: int, col: int, value: Optional[Token]) -> None:
    """Place ``value`` at ``(row, col)``; None marks the cell empty."""
    _check_bounds(world, row, col)
    entity = get_entity_at(world, row, col)
    if entity is None:
        raise RuntimeError(f"Cell ({row}, {col}) has no tile entity")
    switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
    if value is None:
        switch.active = False
        return
    if not isinstance(value, Token):
        raise ValueError(f"Unknown token '{value}'")
    world.component_for_entity(entity, TileType).token = value
    switch.active = True


def active_token_map(world: World) -> Dict[Position, Token]:
    """Return mapping of occupied positions to their tokens."""
    mapping: Dict[Position, Token] = {}
    for entity, position in world.get_component(BoardPosition):
        try:
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if not switch.active:
                continue
            tile: TileType = world.component_for_entity(entity, TileType)
        except KeyError:
            continue
        mapping[(position.row, position.col)] = tile.token
    return mapping


def board_snapshot(world: World) -> Tuple[Tuple[Optional[Token], ...], ...]:
    """Immutable row-major copy of the grid; None marks empty cells."""
    size = board_dimensions(world)
    if size is None:
        return ()
    tokens = active_token_map(world)
    return tuple(tuple(tokens.get((r, c)) for c in range(size)) for r in range(size))


def detect_runs(world: World, row: int, col: int) -> MatchResult:
    """Find the runs of the clicked token through ``(row, col)`` along both axes.

    Both sweeps compare against the token originally at the clicked cell.
    """
    token = get_tile(world, row, col)
    if token is None:
        return MatchResult.empty(row, col)
    types = active_token_map(world)
    # Horizontal sweep
    c_left = col
    while (row, c_left - 1) in types and types[(row, c_left - 1)] == token:
        c_left -= 1
    c_right = col
    while (row, c_right + 1) in types and types[(row, c_right + 1)] == token:
        c_right += 1
    # Vertical sweep
    r_up = row
    while (r_up - 1, col) in types and types[(r_up - 1, col)] == token:
        r_up -= 1
    r_down = row
    while (r_down + 1, col) in types and types[(r_down + 1, col)] == token:
        r_down += 1
    return MatchResult(
        row=row,
        col=col,
        token=token,
        horizontal=(c_left, c_right),
        vertical=(r_up, r_down),
    )


def clear_positions(world: World, positions: Iterable[Position]) -> Tuple[List[Position], List[TokenEntry]]:
    """Mark positions empty. Returns the positions actually cleared and their former tokens."""
    cleared: List[Position] = []
    typed: List[TokenEntry] = []
    for row, col in sorted(set(positions)):
        token = get_tile(world, row, col)
        if token is None:
            continue
        set_tile(world, row, col, None)
        cleared.append((row, col))
        typed.append((row, col, token))
    return cleared, typed


def compute_gravity_moves(world: World) -> List[GravityMove]:
    """Plan a stable per-column compaction toward the bottom row."""
    size = board_dimensions(world)
    if size is None:
        return []
    types = active_token_map(world)
    moves: List[GravityMove] = []
    for col in range(size):
        target_row = size - 1
        for row in range(size - 1, -1, -1):
            token = types.get((row, col))
            if token is None:
                continue
            if row != target_row:
                moves.append(GravityMove(source=(row, col), target=(target_row, col), token=token))
            target_row -= 1
    return moves


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    # Moves within a column are ordered bottom-up, so every target is already vacated.
    for move in moves:
        set_tile(world, move.source[0], move.source[1], None)
        set_tile(world, move.target[0], move.target[1], move.token)


def refill_empty_tiles(world: World, *, rng: random.Random | None = None) -> List[Position]:
    """Draw a fresh uniform palette token for every empty cell."""
    registry = get_tile_registry(world)
    choices = registry.spawnable_tokens()
    rng = _rng_for(world, rng)
    spawned: List[Position] = []
    size = board_dimensions(world) or 0
    for row in range(size):
        for col in range(size):
            if get_tile(world, row, col) is None:
                set_tile(world, row, col, rng.choice(choices))
                spawned.append((row, col))
    return spawned


def resolve(world: World, match: MatchResult | Iterable[Position], *, rng: random.Random | None = None) -> ResolveOutcome:
    """Clear the matched cells, compact each column downward, and refill the gaps.

    An empty match is a no-op: the board is untouched and ``cleared_count`` is 0.
    """
    positions = match.positions if isinstance(match, MatchResult) else list(match)
    if not positions:
        return ResolveOutcome()
    cleared, typed = clear_positions(world, positions)
    moves = compute_gravity_moves(world)
    apply_gravity_moves(world, moves)
    new_tiles = refill_empty_tiles(world, rng=rng)
    return ResolveOutcome(cleared=cleared, tokens=typed, moves=moves, new_tiles=new_tiles)


def find_all_matches(world: World, *, min_length: int = MIN_RUN_LENGTH) -> List[List[Position]]:
    """Detect all contiguous horizontal or vertical runs of length >= ``min_length``."""
    types = active_token_map(world)
    size = board_dimensions(world)
    if not size or not types:
        return []
    matches: List[List[Position]] = []
    lines = [[(r, c) for c in range(size)] for r in range(size)]
    lines += [[(r, c) for r in range(size)] for c in range(size)]
    for line in lines:
        run: List[Position] = []
        last_token = None
        for pos in line:
            tval = types.get(pos)
            if tval is not None and tval == last_token:
                run.append(pos)
            else:
                if len(run) >= min_length:
                    matches.append(run.copy())
                run = [pos] if tval is not None else []
                last_token = tval
        if len(run) >= min_length:
            matches.append(run.copy())
    if not matches:
        return []
    groups = [set(m) for m in matches]
    merged: List[Set[Position]] = []
    while groups:
        first = groups.pop()
        changed = True
        while changed:
            changed = False
            for g in groups[:]:
                if first & g:
                    first |= g
                    groups.remove(g)
                    changed = True
        merged.append(first)
    return [sorted(group) for group in merged]
