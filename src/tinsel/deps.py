"""FastAPI dependencies for Tinsel routes."""

from __future__ import annotations

from fastapi import Request

from tinsel.backends.abstract import StorageBackend
from tinsel.config import TinselConfig
from tinsel.guest_index import GuestIndex
from tinsel.party import PartyNamespace


def get_config(request: Request) -> TinselConfig:
    """Get the loaded configuration from app state."""
    return request.app.state.config


def get_backend(request: Request) -> StorageBackend:
    """Get the storage backend from app state."""
    return request.app.state.backend


def get_parties(request: Request) -> PartyNamespace:
    """Get the party namespace from app state."""
    return request.app.state.parties


def get_guest_index(request: Request) -> GuestIndex:
    """Get the guest lookup index from app state."""
    return request.app.state.guest_index
