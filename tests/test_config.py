from pathlib import Path

import pytest
import redis

from cliphistory.config import HistoryConfig, RedisConfig
from cliphistory.database import JsonHistoryBackend, MemoryHistoryBackend, create_history_backend
from cliphistory.database.redis_manager import RedisHistoryBackend

pytestmark = pytest.mark.usefixtures("clean_env")


def test_defaults(tmp_path):
    config = HistoryConfig.from_env(env_path=tmp_path / "missing.env")
    assert config.backend == "json"
    assert config.max_entries == 200
    assert config.copied_seconds == 2.0
    assert config.history_file == Path.home() / ".cliphistory" / "history.json"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIPHISTORY_BACKEND", "Memory")
    monkeypatch.setenv("CLIPHISTORY_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CLIPHISTORY_MAX_ENTRIES", "15")
    monkeypatch.setenv("CLIPHISTORY_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("CLIPHISTORY_COPIED_SECONDS", "not-a-number")

    config = HistoryConfig.from_env(env_path=tmp_path / "missing.env")
    assert config.backend == "memory"
    assert config.data_dir == tmp_path / "data"
    assert config.max_entries == 15
    assert config.poll_interval == 0.5
    assert config.copied_seconds == 2.0


def test_env_file_is_read(tmp_path):
    env_file = tmp_path / "settings.env"
    env_file.write_text("CLIPHISTORY_MAX_ENTRIES=7\nREDIS_URI=redis://:secret@cache:6380/2\n",
                        encoding="utf-8")

    config = HistoryConfig.from_env(env_path=env_file)
    assert config.max_entries == 7
    assert config.redis == RedisConfig(host="cache", port=6380, db=2, password="secret")


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError):
        HistoryConfig(backend="sqlite")
    with pytest.raises(ValueError):
        HistoryConfig(clipboard="carrier-pigeon")
    with pytest.raises(ValueError):
        HistoryConfig(max_entries=0)


def test_redis_uri_scheme_is_checked():
    with pytest.raises(ValueError):
        RedisConfig.from_uri("http://localhost:6379")


def test_backend_factory(tmp_path):
    assert isinstance(create_history_backend(HistoryConfig(data_dir=tmp_path)), JsonHistoryBackend)
    assert isinstance(create_history_backend(HistoryConfig(backend="memory")), MemoryHistoryBackend)
    assert isinstance(create_history_backend(HistoryConfig(backend="redis")), RedisHistoryBackend)


def test_rediss_uri_turns_on_tls(monkeypatch):
    config = RedisConfig.from_uri("rediss://:secret@cache:6380/1")
    assert config.ssl is True
    assert RedisConfig.from_uri("redis://cache").ssl is False

    created = {}

    class RecordingClient:
        def __init__(self, **kwargs):
            created.update(kwargs)

    monkeypatch.setattr(redis, "Redis", RecordingClient)
    create_history_backend(HistoryConfig(backend="redis", redis=config))
    assert created["ssl"] is True
    assert created["host"] == "cache"
