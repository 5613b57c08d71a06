"""
Shared fixtures.

Redis is replaced by an in-memory object that implements the handful of
redis.Redis methods the adapter calls, so no server is needed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pytest
import redis
from fastapi.testclient import TestClient

from wishub.api.main import create_app
from wishub.config import RedisConfig, Settings
from wishub.database.redis_manager import RedisManager
from wishub.services import CommunityService, DocumentService, StructureService
from wishub.services.api_client import WisClient


class InMemoryRedis:
    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.fail_with: Optional[Exception] = None
        self.closed = False

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def ping(self) -> bool:
        self._check()
        return True

    def get(self, key: str) -> Optional[str]:
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._check()
        self.data[key] = value
        return True

    def delete(self, key: str) -> int:
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    def info(self) -> Dict[str, Any]:
        self._check()
        return {"connected_clients": 1, "used_memory_human": "1M"}

    def dbsize(self) -> int:
        self._check()
        return len(self.data)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
def manager(redis_client):
    return RedisManager(client=redis_client)


@pytest.fixture
def documents(manager):
    return DocumentService(manager)


@pytest.fixture
def community(manager):
    return CommunityService(manager)


@pytest.fixture
def ui_structure(manager):
    return StructureService(manager, "ui")


@pytest.fixture
def settings():
    return Settings(redis=RedisConfig(), api_prefix="/api")


@pytest.fixture
def app(manager, settings):
    return create_app(manager=manager, settings=settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api_client(client):
    return WisClient("http://testserver/api", http=client)


@pytest.fixture
def store_down(redis_client):
    """Make every subsequent Redis call fail."""
    def _break(message: str = "Connection refused") -> None:
        redis_client.fail_with = redis.ConnectionError(message)
    return _break
