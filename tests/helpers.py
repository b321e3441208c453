from __future__ import annotations

import threading
from typing import Sequence

from esper import World

from kojo.components.tile_types import Token
from kojo.systems.board_ops import set_tile

LETTERS = {
    'R': Token.RED,
    'B': Token.BLUE,
    'G': Token.GREEN,
    'Y': Token.YELLOW,
    'P': Token.PURPLE,
    '.': None,
}


def layout_board(world: World, rows: Sequence[str]) -> None:
    """Overwrite the board from letter rows, e.g. ``"RRRBGYPB"``; ``.`` marks an empty cell."""
    for r, line in enumerate(rows):
        for c, letter in enumerate(line):
            set_tile(world, r, c, LETTERS[letter])


def striped_rows(size: int = 8) -> list[str]:
    """A run-free layout: every cell differs from both horizontal and vertical neighbours."""
    cycle = "RBGYP"
    return [''.join(cycle[(r * 2 + c) % len(cycle)] for c in range(size)) for r in range(size)]


class FailingStore:
    """Store whose every call raises, counting the attempts."""

    def __init__(self, payload: str | None = None, *, fail_reads: bool = True, fail_writes: bool = True):
        self.payload = payload
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.read_calls = 0
        self.write_calls = 0

    def read(self, key: str) -> str | None:
        self.read_calls += 1
        if self.fail_reads:
            raise OSError("storage unavailable")
        return self.payload

    def write(self, key: str, value: str) -> None:
        self.write_calls += 1
        if self.fail_writes:
            raise OSError("storage unavailable")
        self.payload = value


class StalledStore:
    """In-memory store whose reads wait until ``release`` is set."""

    def __init__(self, payload: str | None = None):
        self.payload = payload
        self.read_started = threading.Event()
        self.release = threading.Event()

    def read(self, key: str) -> str | None:
        self.read_started.set()
        self.release.wait(timeout=10)
        return self.payload

    def write(self, key: str, value: str) -> None:
        self.payload = value
