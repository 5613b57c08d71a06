from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from wishub.database.redis_manager import RedisManager


def _load_env_file(env_path: Optional[Path] = None) -> None:
    path = env_path or Path.cwd() / ".env"
    if path.exists():
        load_dotenv(path, override=False)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


def _normalize_prefix(prefix: str) -> str:
    cleaned = prefix.strip().rstrip("/")
    if cleaned and not cleaned.startswith("/"):
        cleaned = f"/{cleaned}"
    return cleaned


@dataclass(frozen=True)
class RedisConfig:
    """Where the key-value store lives. REDIS_URI wins over the discrete variables."""
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "RedisConfig":
        _load_env_file(env_path)
        uri = os.getenv("REDIS_URI")
        if uri:
            return cls.from_uri(uri)
        return cls(
            host=os.getenv("REDIS_HOST", cls.host),
            port=_env_int("REDIS_PORT", cls.port),
            db=_env_int("REDIS_DB", cls.db),
            password=os.getenv("REDIS_PASSWORD") or None,
        )

    @classmethod
    def from_uri(cls, uri: str) -> "RedisConfig":
        parsed = urlparse(uri)
        if parsed.scheme not in {"redis", "rediss"}:
            raise ValueError(f"Unsupported Redis URI scheme: {parsed.scheme!r}")
        db = parsed.path.lstrip("/")
        return cls(
            host=parsed.hostname or cls.host,
            port=parsed.port or cls.port,
            db=int(db) if db else cls.db,
            password=parsed.password or None,
        )

    def create_manager(self) -> RedisManager:
        return RedisManager(host=self.host, port=self.port, db=self.db, password=self.password)


@dataclass(frozen=True)
class Settings:
    redis: RedisConfig = field(default_factory=RedisConfig)
    api_prefix: str = "/api"
    api_token: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 3001
    base_url: str = "http://localhost:3001/api"
    poll_interval: float = 3.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "Settings":
        _load_env_file(env_path)
        poll_raw = os.getenv("WIS_POLL_INTERVAL")

        return cls(
            redis=RedisConfig.from_env(env_path=env_path),
            api_prefix=_normalize_prefix(os.getenv("WIS_API_PREFIX", cls.api_prefix)),
            api_token=os.getenv("WIS_API_TOKEN") or None,
            host=os.getenv("WIS_HOST", cls.host),
            port=_env_int("WIS_PORT", cls.port),
            base_url=os.getenv("WIS_BASE_URL", cls.base_url).rstrip("/"),
            poll_interval=float(poll_raw) if poll_raw else cls.poll_interval,
            log_level=os.getenv("WIS_LOG_LEVEL", cls.log_level).upper(),
        )
