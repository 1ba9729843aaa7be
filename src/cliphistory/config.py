from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_DATA_DIR = Path.home() / ".cliphistory"
BACKENDS = ("json", "redis", "memory")
CLIPBOARDS = ("system", "memory")


def _load_env_file(env_path: Optional[Path] = None) -> None:
    if env_path is not None:
        load_dotenv(dotenv_path=env_path, override=False)
    else:
        load_dotenv(override=False)


def _to_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        return default


def _to_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value else default
    except ValueError:
        return default


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    key_prefix: str = "cliphistory"
    ssl: bool = False

    @classmethod
    def from_env(cls) -> "RedisConfig":
        uri = os.getenv("REDIS_URI")
        if uri:
            return cls.from_uri(uri)

        return cls(
            host=os.getenv("REDIS_HOST", cls.host),
            port=_to_int(os.getenv("REDIS_PORT"), cls.port),
            db=_to_int(os.getenv("REDIS_DB"), cls.db),
            password=os.getenv("REDIS_PASSWORD") or None,
            key_prefix=os.getenv("REDIS_KEY_PREFIX", cls.key_prefix),
        )

    @classmethod
    def from_uri(cls, uri: str) -> "RedisConfig":
        parsed = urlparse(uri)
        if parsed.scheme not in {"redis", "rediss"}:
            raise ValueError(f"Unsupported Redis URI scheme: {parsed.scheme!r}")

        db_fragment = parsed.path.lstrip("/")
        return cls(
            host=parsed.hostname or cls.host,
            port=parsed.port or cls.port,
            db=int(db_fragment) if db_fragment else cls.db,
            password=parsed.password or None,
            key_prefix=os.getenv("REDIS_KEY_PREFIX", cls.key_prefix),
            ssl=parsed.scheme == "rediss",
        )


@dataclass(frozen=True)
class HistoryConfig:
    """Runtime settings, read from the environment (and a ``.env`` file)."""
    backend: str = "json"
    clipboard: str = "system"
    data_dir: Path = DEFAULT_DATA_DIR
    max_entries: int = 200
    poll_interval: float = 0.25
    copied_seconds: float = 2.0
    redis: RedisConfig = field(default_factory=RedisConfig)

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown history backend {self.backend!r}; expected one of {BACKENDS}")
        if self.clipboard not in CLIPBOARDS:
            raise ValueError(f"Unknown clipboard {self.clipboard!r}; expected one of {CLIPBOARDS}")
        if self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "HistoryConfig":
        _load_env_file(env_path)

        data_dir = os.getenv("CLIPHISTORY_DATA_DIR")
        return cls(
            backend=os.getenv("CLIPHISTORY_BACKEND", cls.backend).strip().lower(),
            clipboard=os.getenv("CLIPHISTORY_CLIPBOARD", cls.clipboard).strip().lower(),
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            max_entries=_to_int(os.getenv("CLIPHISTORY_MAX_ENTRIES"), cls.max_entries),
            poll_interval=_to_float(os.getenv("CLIPHISTORY_POLL_INTERVAL"), cls.poll_interval),
            copied_seconds=_to_float(os.getenv("CLIPHISTORY_COPIED_SECONDS"), cls.copied_seconds),
            redis=RedisConfig.from_env(),
        )

    @property
    def history_file(self) -> Path:
        return self.data_dir / "history.json"
