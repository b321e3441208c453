from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

from kojo.persistence.stores import LeaderboardStore

logger = logging.getLogger(__name__)


class PersistenceWorker:
    """Runs store reads and writes on one background thread.

    Jobs run in submission order, so the store ends up holding the payload of the most
    recent write. Store errors are logged and never raised to the submitter: a failed
    read resolves to None, a failed write resolves to False after ``retries`` extra tries.
    """

    def __init__(self, store: LeaderboardStore, *, retries: int = 0) -> None:
        if retries < 0:
            raise ValueError(f"retries must be non-negative, got {retries}")
        self.store = store
        self.retries = retries
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="kojo-persistence")
        self._pending: List[Future] = []
        self._lock = threading.Lock()
        self._closed = False

    def submit_read(self, key: str) -> Future:
        return self._submit(self._read, key)

    def submit_write(self, key: str, value: str) -> Future:
        return self._submit(self._write, key, value)

    def _submit(self, fn, *args) -> Future:
        with self._lock:
            if self._closed:
                raise RuntimeError("Persistence worker is shut down")
            future = self._executor.submit(fn, *args)
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.store.read(key)
        except Exception:
            logger.warning("Reading '%s' failed; treating it as absent", key, exc_info=True)
            return None

    def _write(self, key: str, value: str) -> bool:
        for attempt in range(self.retries + 1):
            try:
                self.store.write(key, value)
            except Exception:
                logger.warning("Writing '%s' failed (attempt %d of %d)", key, attempt + 1, self.retries + 1, exc_info=True)
                continue
            return True
        return False

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every job submitted so far has finished."""
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            future.result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
