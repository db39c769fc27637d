"""Pydantic models for parties, guest mappings, and request/response bodies.

JSON on the wire and in storage uses camelCase aliases. Python code uses
snake_case field names; ``populate_by_name`` accepts either.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_GUESTS = 2
MAX_GUESTS = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Stored records ────────────────────────────────────────────


class Party(_CamelModel):
    """One gift exchange, stored as a single document."""

    id: str
    name: str
    budget: str = ""
    criteria: str = ""
    guests: list[str]
    assignments: dict[str, str] = Field(default_factory=dict)
    guest_links: dict[str, str] = Field(default_factory=dict, alias="guestLinks")
    guest_ids: dict[str, str] = Field(default_factory=dict, alias="guestIds")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    def view(self) -> PartyView:
        """Redacted copy safe to show any guest."""
        return PartyView(
            id=self.id,
            name=self.name,
            budget=self.budget,
            criteria=self.criteria,
            guests=list(self.guests),
            created_at=self.created_at,
        )


class PartyView(_CamelModel):
    """Party metadata without assignments or anybody's link."""

    id: str
    name: str
    budget: str = ""
    criteria: str = ""
    guests: list[str]
    created_at: datetime = Field(alias="createdAt")


class GuestMapping(_CamelModel):
    """Guest index entry: which party owns a guest link."""

    party_id: str = Field(alias="partyId")
    guest_name: str = Field(alias="guestName")


# ── Core results ──────────────────────────────────────────────


class CreatedParty(BaseModel):
    party_id: str
    guest_urls: dict[str, str]
    guest_mappings: list[tuple[str, str]]
    party: PartyView


class GuestAssignment(_CamelModel):
    guest_name: str = Field(alias="guestName")
    assignment: str
    party: PartyView

    def to_public_json(self) -> dict:
        """Shape returned to the guest page: only name/budget/criteria."""
        return {
            "guestName": self.guest_name,
            "assignment": self.assignment,
            "party": {
                "name": self.party.name,
                "budget": self.party.budget,
                "criteria": self.party.criteria,
            },
        }


class AssignmentResult(_CamelModel):
    assignment: str
    party_name: str = Field(alias="partyName")


# ── Request bodies ────────────────────────────────────────────


class CreatePartyRequest(_CamelModel):
    """POST /api/parties body. Validated before anything is stored."""

    name: str = ""
    budget: str | None = None
    criteria: str | None = None
    guests: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_roster(self) -> CreatePartyRequest:
        if not self.name.strip() or len(self.guests) < MIN_GUESTS:
            raise ValueError("Party name and at least 2 guests required")
        if len(self.guests) > MAX_GUESTS:
            raise ValueError(f"Maximum {MAX_GUESTS} guests allowed")
        if any(not guest.strip() for guest in self.guests):
            raise ValueError("Guest names must not be empty")
        if len(set(self.guests)) != len(self.guests):
            raise ValueError("Guest names must be unique")
        return self


class AssignRequest(_CamelModel):
    guest_name: str = Field(alias="guestName", min_length=1)
