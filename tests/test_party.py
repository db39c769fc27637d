"""Tests for the party store and guest lookup index.

Uses InMemoryBackend: no database required.
"""

from __future__ import annotations

import gc
from uuid import UUID, uuid4

import pytest

from tinsel import party as party_module
from tinsel.assignments import is_derangement
from tinsel.backends.memory import InMemoryBackend
from tinsel.errors import IndexWriteError, NotFoundError
from tinsel.guest_index import GuestIndex, index_key
from tinsel.party import PartyNamespace

GUESTS = ["Alice", "Bob", "Carol"]


class FlakyBackend(InMemoryBackend):
    """Drops index writes for the keys listed in ``fail_keys``."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_keys: set[str] = set()

    def put_values(self, items: dict[str, dict]) -> list[str]:
        landed = {k: v for k, v in items.items() if k not in self.fail_keys}
        super().put_values(landed)
        return [k for k in items if k in self.fail_keys]


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def namespace(backend):
    return PartyNamespace(backend)


def _create(namespace, guests=GUESTS):
    party_id = namespace.new_unique_id()
    created = namespace.get(party_id).create_party(
        name="Office Party",
        budget="$25",
        criteria="Something handmade",
        guests=list(guests),
    )
    return party_id, created


class TestCreateParty:
    def test_materializes_everything(self, namespace, backend):
        party_id, created = _create(namespace)

        assert created.party_id == party_id
        assert set(created.guest_urls) == set(GUESTS)
        assert len(created.guest_mappings) == 3

        record = backend.get_party(party_id)
        assert record["name"] == "Office Party"
        assert record["guests"] == GUESTS
        assert len(record["guestLinks"]) == 3
        assert is_derangement(record["assignments"], GUESTS)
        assert "createdAt" in record

    def test_guest_ids_are_unique_uuids(self, namespace):
        _, created = _create(namespace)
        ids = [gid for gid, _ in created.guest_mappings]
        assert len(set(ids)) == 3
        for gid in ids:
            assert str(UUID(gid)) == gid

    def test_guest_urls_are_relative_paths(self, namespace):
        _, created = _create(namespace)
        for gid, guest in created.guest_mappings:
            assert created.guest_urls[guest] == f"/guest/{gid}"

    def test_reverse_map_is_inverse(self, namespace, backend):
        party_id, _ = _create(namespace)
        record = backend.get_party(party_id)
        assert {gid: name for name, gid in record["guestLinks"].items()} == record["guestIds"]

    def test_ids_distinct_across_parties(self, namespace):
        seen: set[str] = set()
        party_ids: set[str] = set()
        for _ in range(20):
            party_id, created = _create(namespace)
            party_ids.add(party_id)
            ids = {gid for gid, _ in created.guest_mappings}
            assert not ids & seen
            seen |= ids
        assert len(party_ids) == 20

    def test_view_is_redacted(self, namespace):
        _, created = _create(namespace)
        view = created.party.to_json()
        assert set(view) == {"id", "name", "budget", "criteria", "guests", "createdAt"}

    def test_second_create_replaces_links(self, namespace, backend):
        party_id, first = _create(namespace)
        second = namespace.get(party_id).create_party(
            name="Office Party", budget="", criteria="", guests=GUESTS
        )
        old_ids = {gid for gid, _ in first.guest_mappings}
        new_ids = {gid for gid, _ in second.guest_mappings}
        assert not old_ids & new_ids
        assert set(backend.get_party(party_id)["guestIds"]) == new_ids


class TestGetGuestAssignment:
    def test_returns_own_assignment(self, namespace, backend):
        party_id, created = _create(namespace)
        stored = backend.get_party(party_id)["assignments"]
        store = namespace.get(party_id)

        for gid, guest in created.guest_mappings:
            result = store.get_guest_assignment(gid)
            assert result.guest_name == guest
            assert result.assignment == stored[guest]
            assert result.assignment != guest

    def test_never_exposes_other_assignments(self, namespace):
        party_id, created = _create(namespace)
        gid, _ = created.guest_mappings[0]
        body = namespace.get(party_id).get_guest_assignment(gid).to_json()
        assert set(body) == {"guestName", "assignment", "party"}
        assert "assignments" not in body["party"]
        assert "guestLinks" not in body["party"]
        assert "guestIds" not in body["party"]

    def test_unknown_guest_id(self, namespace):
        party_id, _ = _create(namespace)
        with pytest.raises(NotFoundError, match="Invalid guest link"):
            namespace.get(party_id).get_guest_assignment(str(uuid4()))

    def test_guest_id_from_other_party(self, namespace):
        party_a, _ = _create(namespace)
        _, created_b = _create(namespace, guests=["Dave", "Erin"])
        foreign_gid, _ = created_b.guest_mappings[0]
        with pytest.raises(NotFoundError):
            namespace.get(party_a).get_guest_assignment(foreign_gid)

    def test_missing_party(self, namespace):
        with pytest.raises(NotFoundError, match="Party not found"):
            namespace.get("missing").get_guest_assignment(str(uuid4()))

    def test_missing_assignment(self, namespace, backend):
        party_id, created = _create(namespace)
        record = backend.get_party(party_id)
        record["assignments"] = {}
        backend.put_party(party_id, record)
        gid, _ = created.guest_mappings[0]
        with pytest.raises(NotFoundError, match="Assignment not found"):
            namespace.get(party_id).get_guest_assignment(gid)


class TestAssignGift:
    def test_returns_existing_assignment(self, namespace, backend):
        party_id, _ = _create(namespace)
        stored = backend.get_party(party_id)["assignments"]
        result = namespace.get(party_id).assign_gift("Bob")
        assert result.assignment == stored["Bob"]
        assert result.party_name == "Office Party"

    def test_heals_wiped_assignments_once(self, namespace, backend, monkeypatch):
        party_id, _ = _create(namespace)
        record = backend.get_party(party_id)
        record["assignments"] = {}
        backend.put_party(party_id, record)

        draws = []
        real_generate = party_module.generate_assignments

        def counting_generate(guests):
            draws.append(list(guests))
            return real_generate(guests)

        monkeypatch.setattr(party_module, "generate_assignments", counting_generate)

        store = namespace.get(party_id)
        first = store.assign_gift("Alice")
        second = store.assign_gift("Alice")

        assert len(draws) == 1
        assert first.assignment == second.assignment
        assert first.assignment != "Alice"
        assert is_derangement(backend.get_party(party_id)["assignments"], GUESTS)

    def test_heals_when_assignments_field_absent(self, namespace, backend):
        party_id, _ = _create(namespace)
        record = backend.get_party(party_id)
        del record["assignments"]
        backend.put_party(party_id, record)

        result = namespace.get(party_id).assign_gift("Carol")
        assert result.assignment in {"Alice", "Bob"}

    def test_heals_assignments_missing_a_guest(self, namespace, backend):
        party_id, _ = _create(namespace)
        record = backend.get_party(party_id)
        record["assignments"] = {"Alice": "Bob"}
        backend.put_party(party_id, record)

        result = namespace.get(party_id).assign_gift("Carol")

        assert result.assignment in {"Alice", "Bob"}
        healed = backend.get_party(party_id)["assignments"]
        assert is_derangement(healed, GUESTS)
        assert healed["Carol"] == result.assignment

    def test_heals_self_assignment(self, namespace, backend):
        party_id, _ = _create(namespace)
        record = backend.get_party(party_id)
        record["assignments"] = {"Alice": "Alice", "Bob": "Carol", "Carol": "Bob"}
        backend.put_party(party_id, record)

        assert namespace.get(party_id).assign_gift("Alice").assignment != "Alice"
        assert is_derangement(backend.get_party(party_id)["assignments"], GUESTS)

    def test_unknown_guest(self, namespace):
        party_id, _ = _create(namespace)
        with pytest.raises(NotFoundError, match="Guest not found"):
            namespace.get(party_id).assign_gift("Mallory")

    def test_missing_party(self, namespace):
        with pytest.raises(NotFoundError, match="Party not found"):
            namespace.get("missing").assign_gift("Alice")


class TestGetParty:
    def test_full_record(self, namespace):
        party_id, _ = _create(namespace)
        party = namespace.get(party_id).get_party()
        assert party.id == party_id
        assert is_derangement(party.assignments, GUESTS)
        assert set(party.guest_links) == set(GUESTS)

    def test_missing(self, namespace):
        with pytest.raises(NotFoundError):
            namespace.get("missing").get_party()


class TestPartyNamespace:
    def test_same_party_shares_lock(self, namespace):
        assert namespace.get("p1")._lock is namespace.get("p1")._lock

    def test_parties_do_not_share_locks(self, namespace):
        assert namespace.get("p1")._lock is not namespace.get("p2")._lock

    def test_idle_locks_released(self, namespace):
        stores = [namespace.get(uuid4().hex) for _ in range(200)]
        assert len(namespace._locks) == 200

        del stores
        gc.collect()
        assert len(namespace._locks) == 0

    def test_lock_survives_while_store_alive(self, namespace):
        store = namespace.get("p1")
        gc.collect()
        assert namespace.get("p1")._lock is store._lock

    def test_missing_party_lookups_do_not_accumulate(self, namespace):
        for _ in range(50):
            with pytest.raises(NotFoundError):
                namespace.get(uuid4().hex).get_party()
        gc.collect()
        assert len(namespace._locks) == 0

    def test_new_ids_unique(self, namespace):
        ids = {namespace.new_unique_id() for _ in range(100)}
        assert len(ids) == 100


class TestGuestIndex:
    def test_store_and_lookup(self, namespace, backend):
        party_id, created = _create(namespace)
        index = GuestIndex(backend)
        index.store(created.guest_mappings, party_id)

        for gid, guest in created.guest_mappings:
            mapping = index.lookup(gid)
            assert mapping.party_id == party_id
            assert mapping.guest_name == guest
            assert backend.get_value(index_key(gid)) == {"partyId": party_id, "guestName": guest}

        assert backend.count_records() == {"parties": 1, "guestLinks": 3}

    def test_lookup_unknown(self, backend):
        assert GuestIndex(backend).lookup(str(uuid4())) is None

    def test_partial_failure_names_failed_ids(self):
        backend = FlakyBackend()
        namespace = PartyNamespace(backend)
        party_id, created = _create(namespace)
        bad_gid, _ = created.guest_mappings[1]
        backend.fail_keys = {index_key(bad_gid)}

        index = GuestIndex(backend)
        with pytest.raises(IndexWriteError) as excinfo:
            index.store(created.guest_mappings, party_id)

        assert excinfo.value.party_id == party_id
        assert excinfo.value.failed_guest_ids == [bad_gid]
        assert index.lookup(bad_gid) is None
        for gid, _ in created.guest_mappings:
            if gid != bad_gid:
                assert index.lookup(gid) is not None
