from __future__ import annotations

import json
import logging
from typing import Iterable, Tuple

from kojo.components.leaderboard import LeaderboardEntry
from kojo.constants import LEADERBOARD_CAPACITY

logger = logging.getLogger(__name__)

Entries = Tuple[LeaderboardEntry, ...]


def _check_points(value: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{label} must be a non-negative integer, got {value!r}")


def apply_score(total: int, delta: int) -> int:
    """Add a non-negative point delta to a running total. No clamping, no maximum."""
    _check_points(delta, "Score delta")
    return total + delta


def merge_leaderboard(
    entries: Iterable[LeaderboardEntry],
    name: str,
    score: int,
    *,
    capacity: int = LEADERBOARD_CAPACITY,
) -> Entries:
    """Merge ``(name, score)`` into a top-``capacity`` leaderboard.

    An existing entry keeps the higher of its score and ``score``; otherwise a new entry is
    appended. The result is sorted by score descending (ties keep their prior order) and
    truncated; entries past the cap are dropped.
    """
    if not isinstance(name, str) or not name:
        raise ValueError("Leaderboard name must be a non-empty string")
    _check_points(score, "Leaderboard score")
    merged = list(entries)
    for index, entry in enumerate(merged):
        if entry.name == name:
            merged[index] = LeaderboardEntry(name=name, score=max(entry.score, score))
            break
    else:
        merged.append(LeaderboardEntry(name=name, score=score))
    merged.sort(key=lambda entry: entry.score, reverse=True)
    return tuple(merged[:capacity])


def normalize_leaderboard(entries: Iterable[LeaderboardEntry], *, capacity: int = LEADERBOARD_CAPACITY) -> Entries:
    """Fold arbitrary entries into a valid leaderboard (unique names, sorted, capped)."""
    result: Entries = ()
    for entry in entries:
        result = merge_leaderboard(result, entry.name, entry.score, capacity=capacity)
    return result


def serialize_leaderboard(entries: Iterable[LeaderboardEntry]) -> str:
    return json.dumps([{"name": entry.name, "score": entry.score} for entry in entries])


def deserialize_leaderboard(payload: str | None, *, capacity: int = LEADERBOARD_CAPACITY) -> Entries:
    """Parse a stored leaderboard. Absent, empty or malformed payloads yield no entries."""
    if not payload:
        return ()
    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed leaderboard payload")
        return ()
    if not isinstance(data, list):
        logger.warning("Ignoring leaderboard payload of type %s", type(data).__name__)
        return ()
    entries = []
    for item in data:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        score = item.get("score")
        if not isinstance(name, str) or not name:
            continue
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            continue
        entries.append(LeaderboardEntry(name=name, score=score))
    if len(entries) != len(data):
        logger.warning("Skipped %d malformed leaderboard entries", len(data) - len(entries))
    return normalize_leaderboard(entries, capacity=capacity)
