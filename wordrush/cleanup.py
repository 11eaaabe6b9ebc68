"""Retention sweep: delete rounds older than the retention window.

The sweep never takes round locks. A request that races with a deletion sees
the round as missing and gets a NotFound.
"""

from __future__ import annotations
from typing import List, Optional
import logging
import threading
from .config import CLEANUP_INTERVAL_SECONDS, RETENTION_SECONDS
from .game import LOCKS, now_ms
from .store import GameStore

logger = logging.getLogger(__name__)

def purge_expired(store: GameStore, now: Optional[int] = None, retention_seconds: int = RETENTION_SECONDS) -> List[str]:
    now = now_ms() if now is None else now
    cutoff = now - retention_seconds * 1000
    deleted = []
    for code in store.expired_codes(cutoff):
        if store.delete(code):
            LOCKS.discard(code)
            deleted.append(code)
            logger.info("Deleted old game: %s", code)
    return deleted


class RetentionSweeper:
    """Runs purge_expired every `interval` seconds on a daemon thread."""

    def __init__(self, store: GameStore, interval: int = CLEANUP_INTERVAL_SECONDS,
                 retention_seconds: int = RETENTION_SECONDS):
        self.store = store
        self.interval = interval
        self.retention_seconds = retention_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> List[str]:
        return purge_expired(self.store, retention_seconds=self.retention_seconds)

    def _worker(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.run_once()
            except Exception:
                # Keep sweeping on the next tick; the store may recover.
                logger.exception("Retention sweep failed")

    def start(self) -> None:
        if self.interval <= 0 or self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._worker, name="retention-sweep", daemon=True)
        self._thread.start()
        logger.info("Retention sweep every %ss (retention %ss)", self.interval, self.retention_seconds)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
