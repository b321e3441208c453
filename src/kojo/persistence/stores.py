from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from kojo.constants import DATA_DIR_ENV

logger = logging.getLogger(__name__)


class LeaderboardStore(Protocol):
    """Key/value storage the host provides. Either call may raise; callers recover."""

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...


class InMemoryStore:
    """Process-local store for standalone runs and tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def write(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value


def default_data_dir() -> Path:
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[3] / "data"


class JsonFileStore:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory is not None else default_data_dir()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        try:
            with self.path_for(key).open("r", encoding="utf-8") as handle:
                return handle.read()
        except FileNotFoundError:
            return None

    def write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        # Write beside the target and swap it in so a crash never leaves a half-written file.
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            handle.write(value)
        os.replace(tmp_path, path)
        logger.debug("Wrote %s", path)
