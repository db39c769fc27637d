"""Guest link identifiers as they appear in URLs.

Guest ids are minted as ``str(uuid4())``: 36 characters, hyphenated.
Anything else is rejected before touching storage.
"""

from __future__ import annotations

import re

_GUEST_ID = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_guest_id(guest_id: str) -> bool:
    return len(guest_id) == 36 and bool(_GUEST_ID.match(guest_id))


def absolute_url(base_url: str, path: str) -> str:
    """Join a configured or request base URL with a relative guest path."""
    return base_url.rstrip("/") + path


_GUEST_ID_IN_PATH = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def redact_guest_ids(path: str) -> str:
    """Mask guest ids in a URL path. A guest id is a credential; keep it out of logs."""
    return _GUEST_ID_IN_PATH.sub("<guest>", path)
