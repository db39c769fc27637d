"""Exception hierarchy for Tinsel.

The gateway maps these onto HTTP status codes; see ``tinsel.app``.
"""

from __future__ import annotations


class TinselError(Exception):
    """Base for every error raised by the service."""


class InvalidInputError(TinselError):
    """Malformed or out-of-bounds input. Never retried."""


class NotFoundError(TinselError):
    """Unknown party, unknown guest link, or missing assignment."""


class RateLimitedError(TinselError):
    """Client exceeded the configured request rate."""


class AssignmentError(TinselError):
    """No derangement could be produced within the attempt budget."""


class IndexWriteError(TinselError):
    """Some guest index entries were not written.

    Carries the exact subset that failed so the caller can retry it.
    """

    def __init__(self, party_id: str, failed_guest_ids: list[str]) -> None:
        self.party_id = party_id
        self.failed_guest_ids = list(failed_guest_ids)
        super().__init__(
            f"{len(self.failed_guest_ids)} guest index entries failed "
            f"for party {party_id}"
        )
