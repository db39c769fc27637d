"""In-memory backend. Used by tests and the default development config."""

from __future__ import annotations

import copy
import threading

from tinsel.backends.abstract import StorageBackend


class InMemoryBackend(StorageBackend):
    """Dict-backed storage. Stored records are deep-copied in and out."""

    def __init__(self) -> None:
        self._parties: dict[str, dict] = {}
        self._values: dict[str, dict] = {}
        self._lock = threading.Lock()

    def get_party(self, party_id: str) -> dict | None:
        with self._lock:
            record = self._parties.get(party_id)
            return copy.deepcopy(record) if record is not None else None

    def put_party(self, party_id: str, record: dict) -> None:
        with self._lock:
            self._parties[party_id] = copy.deepcopy(record)

    def get_value(self, key: str) -> dict | None:
        with self._lock:
            value = self._values.get(key)
            return dict(value) if value is not None else None

    def put_values(self, items: dict[str, dict]) -> list[str]:
        with self._lock:
            for key, value in items.items():
                self._values[key] = dict(value)
        return []

    def count_records(self) -> dict[str, int]:
        with self._lock:
            return {"parties": len(self._parties), "guestLinks": len(self._values)}
