"""Storage backends for party records and the guest index."""

from tinsel.backends.abstract import StorageBackend
from tinsel.backends.memory import InMemoryBackend

__all__ = ["InMemoryBackend", "StorageBackend"]
