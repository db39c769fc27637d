"""Storage interface shared by every backend.

Two key spaces: party documents keyed by party id, and guest index
entries keyed by ``guest:{guestId}``. Records are plain JSON dicts;
models live one layer up.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Durable state for parties plus a key-value store for the guest index."""

    @abstractmethod
    def get_party(self, party_id: str) -> dict | None:
        """Return the stored party document, or None."""

    @abstractmethod
    def put_party(self, party_id: str, record: dict) -> None:
        """Write the whole party document in one atomic operation."""

    @abstractmethod
    def get_value(self, key: str) -> dict | None:
        """Read one index entry."""

    @abstractmethod
    def put_values(self, items: dict[str, dict]) -> list[str]:
        """Write index entries in one batch. Return the keys that failed."""

    @abstractmethod
    def count_records(self) -> dict[str, int]:
        """Number of stored parties and guest index entries."""

    def close(self) -> None:
        """Release connections. No-op by default."""
