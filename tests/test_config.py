import logging

import pytest

from tinsel.app import build_backend
from tinsel.backends.memory import InMemoryBackend
from tinsel.config import TinselConfig, load_config
from tinsel.logging_config import setup_logging

_ENV_VARS = [
    "TINSEL_STORAGE",
    "TINSEL_ARANGO_HOST",
    "TINSEL_ARANGO_DB",
    "TINSEL_ARANGO_USER",
    "TINSEL_ARANGO_PASSWORD",
    "TINSEL_API_KEY",
    "TINSEL_HOST",
    "TINSEL_PORT",
    "TINSEL_PUBLIC_URL",
    "TINSEL_RATE_LIMIT",
    "TINSEL_INDEX_WRITE_ATTEMPTS",
    "TINSEL_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path / "missing.ini")
    assert config == TinselConfig()
    assert config.storage == "memory"
    assert config.api_key == ""
    assert config.rate_limit == 10


def test_ini_file(tmp_path):
    path = tmp_path / "tinsel.ini"
    path.write_text(
        "[storage]\nbackend = arango\n"
        "[arango]\nhost = http://db:8529\ndatabase = santa\n"
        "[gateway]\napi_key = s3cret\nport = 9000\nrate_limit = 0\n"
    )
    config = load_config(path)
    assert config.storage == "arango"
    assert config.arango_host == "http://db:8529"
    assert config.arango_db == "santa"
    assert config.api_key == "s3cret"
    assert config.port == 9000
    assert config.rate_limit == 0


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "tinsel.ini"
    path.write_text("[gateway]\nport = 9000\npublic_url = http://a\n")
    monkeypatch.setenv("TINSEL_PORT", "9100")
    monkeypatch.setenv("TINSEL_PUBLIC_URL", "https://santa.example.com")
    monkeypatch.setenv("TINSEL_INDEX_WRITE_ATTEMPTS", "4")

    config = load_config(path)
    assert config.port == 9100
    assert config.public_url == "https://santa.example.com"
    assert config.index_write_attempts == 4


def test_unknown_storage_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("TINSEL_STORAGE", "redis")
    with pytest.raises(ValueError, match="Unknown storage"):
        load_config(tmp_path / "missing.ini")


def test_index_attempts_must_be_positive():
    with pytest.raises(ValueError):
        TinselConfig(index_write_attempts=0)


def test_config_is_frozen():
    config = TinselConfig()
    with pytest.raises(AttributeError):
        config.port = 1


def test_memory_backend_built_by_default():
    assert isinstance(build_backend(TinselConfig()), InMemoryBackend)


def test_setup_logging_idempotent():
    logger1 = setup_logging(logging.DEBUG)
    logger2 = setup_logging(logging.DEBUG)
    assert logger1 is logger2
    assert logger1.name == "tinsel"
    assert len(logger1.handlers) == 1
