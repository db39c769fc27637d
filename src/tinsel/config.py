"""Configuration for the Tinsel service.

Reads from config/tinsel.ini if present, environment variables override.
Credentials never checked into version control.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path

_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent / "config" / "tinsel.ini"

STORAGE_KINDS = ("memory", "arango")

_INT_FIELDS = ("port", "rate_limit", "index_write_attempts")


@dataclass(frozen=True)
class TinselConfig:
    """Service configuration. Immutable once loaded."""

    storage: str = "memory"
    arango_host: str = "http://127.0.0.1:8529"
    arango_db: str = "tinsel"
    arango_user: str = "root"
    arango_password: str = ""
    api_key: str = ""
    host: str = "127.0.0.1"
    port: int = 8000
    public_url: str = ""
    rate_limit: int = 10
    index_write_attempts: int = 2
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.storage not in STORAGE_KINDS:
            raise ValueError(
                f"Unknown storage backend {self.storage!r}, expected one of {STORAGE_KINDS}"
            )
        if self.index_write_attempts < 1:
            raise ValueError("index_write_attempts must be at least 1")


def load_config(config_path: Path | None = None) -> TinselConfig:
    """Load config from INI file, then override with environment variables."""
    path = config_path or _CONFIG_FILE
    kwargs: dict = {}

    if path.exists():
        parser = configparser.ConfigParser()
        parser.read(path)
        sections = {
            "storage": [("backend", "storage")],
            "arango": [
                ("host", "arango_host"),
                ("database", "arango_db"),
                ("username", "arango_user"),
                ("password", "arango_password"),
            ],
            "gateway": [
                ("api_key", "api_key"),
                ("host", "host"),
                ("port", "port"),
                ("public_url", "public_url"),
                ("rate_limit", "rate_limit"),
                ("index_write_attempts", "index_write_attempts"),
                ("log_level", "log_level"),
            ],
        }
        for section, keys in sections.items():
            if not parser.has_section(section):
                continue
            for ini_key, config_key in keys:
                val = parser.get(section, ini_key, fallback=None)
                if val is not None:
                    kwargs[config_key] = val

    env_map = {
        "TINSEL_STORAGE": "storage",
        "TINSEL_ARANGO_HOST": "arango_host",
        "TINSEL_ARANGO_DB": "arango_db",
        "TINSEL_ARANGO_USER": "arango_user",
        "TINSEL_ARANGO_PASSWORD": "arango_password",
        "TINSEL_API_KEY": "api_key",
        "TINSEL_HOST": "host",
        "TINSEL_PORT": "port",
        "TINSEL_PUBLIC_URL": "public_url",
        "TINSEL_RATE_LIMIT": "rate_limit",
        "TINSEL_INDEX_WRITE_ATTEMPTS": "index_write_attempts",
        "TINSEL_LOG_LEVEL": "log_level",
    }
    for env_key, config_key in env_map.items():
        val = os.getenv(env_key)
        if val is not None:
            kwargs[config_key] = val

    for key in _INT_FIELDS:
        if key in kwargs:
            kwargs[key] = int(kwargs[key])
    return TinselConfig(**kwargs)
