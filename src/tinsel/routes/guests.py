"""Guest-facing endpoints. Each reveals one guest's own assignment only."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse

from tinsel.deps import get_guest_index, get_parties
from tinsel.errors import InvalidInputError, NotFoundError, TinselError
from tinsel.guest_index import GuestIndex
from tinsel.links import is_valid_guest_id
from tinsel.pages import GUEST_PAGE
from tinsel.party import PartyNamespace

logger = logging.getLogger("tinsel.routes.guests")

router = APIRouter(tags=["guests"])


@router.get("/api/guest/{guest_id}/assignment")
def guest_assignment(
    guest_id: str,
    parties: PartyNamespace = Depends(get_parties),
    guest_index: GuestIndex = Depends(get_guest_index),
):
    if not is_valid_guest_id(guest_id):
        raise InvalidInputError("Invalid guest ID")

    mapping = guest_index.lookup(guest_id)
    if mapping is None:
        raise NotFoundError("Guest link not found")

    try:
        result = parties.get(mapping.party_id).get_guest_assignment(guest_id)
    except NotFoundError as exc:
        # index says the link exists, so the party record is inconsistent
        logger.error("Party %s could not serve a published guest link: %s", mapping.party_id, exc)
        raise TinselError("Failed to load assignment") from exc
    return result.to_public_json()


@router.get("/guest/{guest_id}", response_class=HTMLResponse)
def guest_page(
    guest_id: str,
    guest_index: GuestIndex = Depends(get_guest_index),
):
    if not is_valid_guest_id(guest_id):
        return PlainTextResponse("Invalid guest link", status_code=400)
    if guest_index.lookup(guest_id) is None:
        return PlainTextResponse("Guest link not found", status_code=404)
    return HTMLResponse(GUEST_PAGE)
