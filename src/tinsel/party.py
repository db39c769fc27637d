"""Party store: sole owner of one party's state.

A ``PartyNamespace`` hands out one ``PartyStore`` per party id. Stores for
the same id share a lock, so at most one mutation per party is in flight.
Different parties never share storage or locks.
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Sequence
from uuid import uuid4

from tinsel.assignments import generate_assignments, is_derangement
from tinsel.backends.abstract import StorageBackend
from tinsel.errors import NotFoundError
from tinsel.models import AssignmentResult, CreatedParty, GuestAssignment, Party

logger = logging.getLogger("tinsel.party")

GUEST_PATH = "/guest/{guest_id}"


def guest_path(guest_id: str) -> str:
    return GUEST_PATH.format(guest_id=guest_id)


class _PartyLock:
    """A lock that can be weakly referenced, so idle parties drop out of the namespace."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def __enter__(self) -> _PartyLock:
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self._lock.release()


class PartyNamespace:
    """Mints party ids and addresses the store that owns each party."""

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend
        # held strongly only by live PartyStores
        self._locks: weakref.WeakValueDictionary[str, _PartyLock] = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def new_unique_id(self) -> str:
        return uuid4().hex

    def get(self, party_id: str) -> PartyStore:
        with self._locks_guard:
            lock = self._locks.get(party_id)
            if lock is None:
                lock = _PartyLock()
                self._locks[party_id] = lock
        return PartyStore(party_id, self._backend, lock)


class PartyStore:
    """Operations on a single party's stored record."""

    def __init__(
        self,
        party_id: str,
        backend: StorageBackend,
        lock: _PartyLock | None = None,
    ) -> None:
        self.party_id = party_id
        self._backend = backend
        self._lock = lock or _PartyLock()

    def _load(self) -> Party:
        record = self._backend.get_party(self.party_id)
        if record is None:
            raise NotFoundError("Party not found")
        return Party.model_validate(record)

    def _save(self, party: Party) -> None:
        self._backend.put_party(self.party_id, party.to_json())

    def create_party(
        self,
        name: str,
        budget: str,
        criteria: str,
        guests: Sequence[str],
    ) -> CreatedParty:
        """Draw assignments, mint guest links, and commit the party in one write.

        Inputs are assumed validated. Calling this again on the same store
        replaces the draw and every guest link.
        """
        with self._lock:
            assignments = generate_assignments(guests)

            guest_links: dict[str, str] = {}
            guest_ids: dict[str, str] = {}
            for guest in guests:
                guest_id = str(uuid4())
                while guest_id in guest_ids:
                    guest_id = str(uuid4())
                guest_links[guest] = guest_id
                guest_ids[guest_id] = guest

            party = Party(
                id=self.party_id,
                name=name,
                budget=budget,
                criteria=criteria,
                guests=list(guests),
                assignments=assignments,
                guest_links=guest_links,
                guest_ids=guest_ids,
            )
            self._save(party)

        logger.info("Created party %s with %d guests", self.party_id, len(guests))
        return CreatedParty(
            party_id=self.party_id,
            guest_urls={guest: guest_path(gid) for guest, gid in guest_links.items()},
            guest_mappings=[(gid, guest) for guest, gid in guest_links.items()],
            party=party.view(),
        )

    def get_guest_assignment(self, guest_id: str) -> GuestAssignment:
        """The recipient for one guest, plus redacted party details."""
        party = self._load()

        guest_name = party.guest_ids.get(guest_id)
        if guest_name is None:
            raise NotFoundError("Invalid guest link")

        recipient = party.assignments.get(guest_name)
        if recipient is None:
            raise NotFoundError("Assignment not found for guest")

        return GuestAssignment(guest_name=guest_name, assignment=recipient, party=party.view())

    def assign_gift(self, guest_name: str) -> AssignmentResult:
        """Return a guest's recipient.

        Redraws the whole party first if its stored assignments are missing
        or no longer a derangement of the roster.
        """
        with self._lock:
            party = self._load()
            if guest_name not in party.guests:
                raise NotFoundError("Guest not found in party")

            if not is_derangement(party.assignments, party.guests):
                logger.warning("Party %s has no valid assignments, redrawing", self.party_id)
                party.assignments = generate_assignments(party.guests)
                self._save(party)

        return AssignmentResult(
            assignment=party.assignments[guest_name],
            party_name=party.name,
        )

    def get_party(self) -> Party:
        """Full record including every assignment. Trusted callers only."""
        return self._load()
