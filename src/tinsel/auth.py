"""API key authentication for the admin routes.

The admin router is only mounted when a key is configured, so an empty
key never opens it.
"""

from __future__ import annotations

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def make_api_key_checker(expected_key: str):
    """Return a FastAPI dependency that checks the X-API-Key header."""

    async def check_api_key(
        api_key: str | None = Security(_api_key_header),
    ) -> str:
        if not expected_key or api_key != expected_key:
            raise HTTPException(
                status_code=401,
                detail="Invalid or missing API key",
            )
        return api_key

    return check_api_key
