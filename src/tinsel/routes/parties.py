"""Party creation endpoint.

The body is validated by ``CreatePartyRequest`` before this module runs,
so the party store only ever sees a clean roster.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from tinsel.config import TinselConfig
from tinsel.deps import get_config, get_guest_index, get_parties
from tinsel.errors import IndexWriteError
from tinsel.guest_index import GuestIndex
from tinsel.links import absolute_url
from tinsel.models import CreatePartyRequest
from tinsel.party import PartyNamespace

logger = logging.getLogger("tinsel.routes.parties")

router = APIRouter(prefix="/api", tags=["parties"])


def publish_guest_links(
    guest_index: GuestIndex,
    guest_mappings: list[tuple[str, str]],
    party_id: str,
    attempts: int,
) -> None:
    """Write the guest index, retrying only the entries that failed."""
    pending = list(guest_mappings)
    for attempt in range(1, attempts + 1):
        try:
            guest_index.store(pending, party_id)
            return
        except IndexWriteError as exc:
            failed = set(exc.failed_guest_ids)
            pending = [(gid, name) for gid, name in pending if gid in failed]
            logger.warning(
                "Attempt %d/%d: %d guest links for party %s not published",
                attempt,
                attempts,
                len(pending),
                party_id,
            )
    raise IndexWriteError(party_id, [gid for gid, _ in pending])


@router.post("/parties")
def create_party(
    body: CreatePartyRequest,
    request: Request,
    parties: PartyNamespace = Depends(get_parties),
    guest_index: GuestIndex = Depends(get_guest_index),
    config: TinselConfig = Depends(get_config),
):
    party_id = parties.new_unique_id()
    created = parties.get(party_id).create_party(
        name=body.name,
        budget=body.budget or "",
        criteria=body.criteria or "",
        guests=body.guests,
    )
    publish_guest_links(
        guest_index, created.guest_mappings, party_id, config.index_write_attempts
    )

    base_url = config.public_url or str(request.base_url)
    return {
        "partyId": created.party_id,
        "guestUrls": {
            guest: absolute_url(base_url, path) for guest, path in created.guest_urls.items()
        },
        "party": created.party.to_json(),
    }
