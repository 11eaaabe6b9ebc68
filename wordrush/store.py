# Game Store: keyed storage for round documents, addressed by round code.
# Backends:
# - MemoryGameStore: process-local dict, used by tests and single-process dev.
# - FileGameStore: one JSON file per round under a directory.
# - SqlGameStore (db.py): key/value table through SQLAlchemy.
#
# Stores only move documents in and out. Serializing writers per round code is
# the job of RoundLocks, which the game operations hold around load/mutate/save.

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional
import json
import logging
import os
import threading
from pydantic import ValidationError
from .models import RoundDocument

logger = logging.getLogger(__name__)

class GameStore(ABC):
    @abstractmethod
    def get(self, code: str) -> Optional[RoundDocument]:
        """Return the stored round, or None if there is none."""

    @abstractmethod
    def put(self, code: str, doc: RoundDocument) -> None:
        """Insert or replace the round stored under `code`."""

    @abstractmethod
    def delete(self, code: str) -> bool:
        """Remove a round. Returns False if it was already gone."""

    @abstractmethod
    def expired_codes(self, cutoff_ms: int) -> List[str]:
        """Codes of rounds created strictly before `cutoff_ms`."""

    def exists(self, code: str) -> bool:
        return self.get(code) is not None


class MemoryGameStore(GameStore):
    def __init__(self):
        # Documents are kept serialized so callers never share mutable state.
        self._docs: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, code: str) -> Optional[RoundDocument]:
        with self._lock:
            raw = self._docs.get(code)
        if raw is None:
            return None
        return RoundDocument.model_validate_json(raw)

    def put(self, code: str, doc: RoundDocument) -> None:
        raw = doc.model_dump_json(by_alias=True)
        with self._lock:
            self._docs[code] = raw

    def delete(self, code: str) -> bool:
        with self._lock:
            return self._docs.pop(code, None) is not None

    def expired_codes(self, cutoff_ms: int) -> List[str]:
        with self._lock:
            items = list(self._docs.items())
        expired = []
        for code, raw in items:
            if RoundDocument.model_validate_json(raw).created_at < cutoff_ms:
                expired.append(code)
        return expired

    def __len__(self) -> int:
        return len(self._docs)


class FileGameStore(GameStore):
    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, code: str) -> Optional[Path]:
        # Codes come straight from URLs; never let one escape the directory.
        if not code or not code.isalnum():
            return None
        return self.directory / f"{code}.json"

    def get(self, code: str) -> Optional[RoundDocument]:
        path = self._path(code)
        if path is None:
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return RoundDocument.model_validate_json(raw)

    def put(self, code: str, doc: RoundDocument) -> None:
        path = self._path(code)
        if path is None:
            raise ValueError(f"Invalid round code: {code!r}")
        self.directory.mkdir(parents=True, exist_ok=True)
        data = json.dumps(doc.model_dump(by_alias=True), indent=2)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(data, encoding="utf-8")
        os.replace(tmp, path)

    def delete(self, code: str) -> bool:
        path = self._path(code)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def expired_codes(self, cutoff_ms: int) -> List[str]:
        expired = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                doc = RoundDocument.model_validate_json(path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                # Deleted by someone else since the directory listing.
                continue
            except ValidationError as e:
                logger.warning("Skipping unreadable round file %s: %s", path.name, e)
                continue
            if doc.created_at < cutoff_ms:
                expired.append(path.stem)
        return expired


class RoundLocks:
    """One lock per round code, created on demand."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def for_code(self, code: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(code)
            if lock is None:
                lock = threading.Lock()
                self._locks[code] = lock
            return lock

    def discard(self, code: str) -> bool:
        """Forget the lock for `code` unless a request is holding it."""
        with self._guard:
            lock = self._locks.get(code)
            if lock is None or lock.locked():
                return False
            del self._locks[code]
            return True

    def __len__(self) -> int:
        return len(self._locks)
