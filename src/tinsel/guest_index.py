"""Guest lookup index: guest id -> (party id, guest name).

A denormalized back-reference used only to find which party owns a link.
Assignments are always read from the party itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tinsel.backends.abstract import StorageBackend
from tinsel.errors import IndexWriteError
from tinsel.models import GuestMapping

logger = logging.getLogger("tinsel.guest_index")

KEY_PREFIX = "guest:"


def index_key(guest_id: str) -> str:
    return f"{KEY_PREFIX}{guest_id}"


class GuestIndex:
    """Read-mostly index over every published guest link."""

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend

    def store(self, guest_mappings: Iterable[tuple[str, str]], party_id: str) -> None:
        """Publish one entry per ``(guest_id, guest_name)`` in a single batch.

        Raises ``IndexWriteError`` naming the guest ids that did not land.
        """
        items = {
            index_key(guest_id): GuestMapping(party_id=party_id, guest_name=guest_name).to_json()
            for guest_id, guest_name in guest_mappings
        }
        failed_keys = self._backend.put_values(items)
        if failed_keys:
            failed = [key[len(KEY_PREFIX):] for key in failed_keys]
            raise IndexWriteError(party_id, failed)
        logger.debug("Published %d guest links for party %s", len(items), party_id)

    def lookup(self, guest_id: str) -> GuestMapping | None:
        data = self._backend.get_value(index_key(guest_id))
        if data is None:
            return None
        return GuestMapping.model_validate(data)
