"""Admin endpoints — full party records and assignment repair.

Mounted only when an API key is configured. These expose every guest's
assignment and must never sit behind a guest-facing path.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tinsel.backends.abstract import StorageBackend
from tinsel.deps import get_backend, get_parties
from tinsel.models import AssignRequest
from tinsel.party import PartyNamespace

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/parties/{party_id}")
def get_party(party_id: str, parties: PartyNamespace = Depends(get_parties)):
    return parties.get(party_id).get_party().to_json()


@router.post("/parties/{party_id}/assign")
def assign_gift(
    party_id: str,
    body: AssignRequest,
    parties: PartyNamespace = Depends(get_parties),
):
    return parties.get(party_id).assign_gift(body.guest_name).to_json()


@router.get("/counts")
def counts(backend: StorageBackend = Depends(get_backend)):
    return backend.count_records()
