import json

import pytest
import redis

from wishub.database.redis_manager import RedisManager
from wishub.errors import StoreError


def test_missing_key_reads_as_none(manager):
    assert manager.get("nothing-here") is None


def test_set_then_get_round_trips_json(manager, redis_client):
    manager.set("wis-documents", [{"id": "a", "isFavorite": True}])

    assert json.loads(redis_client.data["wis-documents"]) == [{"id": "a", "isFavorite": True}]
    assert manager.get("wis-documents") == [{"id": "a", "isFavorite": True}]


def test_set_replaces_whole_value(manager):
    manager.set("k", [1, 2, 3])
    manager.set("k", [4])
    assert manager.get("k") == [4]


def test_delete_reports_existence(manager):
    manager.set("k", {"a": 1})
    assert manager.delete("k") is True
    assert manager.delete("k") is False
    assert manager.get("k") is None


def test_bytes_values_are_decoded(manager, redis_client):
    redis_client.data["k"] = b'{"a": 1}'
    assert manager.get("k") == {"a": 1}


def test_corrupt_value_raises_store_error(manager, redis_client):
    redis_client.data["k"] = "{not json"
    with pytest.raises(StoreError) as excinfo:
        manager.get("k")
    assert "k" in excinfo.value.message


def test_redis_failures_become_store_errors(manager, store_down):
    store_down("Connection refused")
    with pytest.raises(StoreError) as excinfo:
        manager.set("k", [])
    assert excinfo.value.details == "Connection refused"
    with pytest.raises(StoreError):
        manager.get("k")
    with pytest.raises(StoreError):
        manager.delete("k")


def test_connection_is_checked_on_construction(redis_client):
    redis_client.fail_with = redis.ConnectionError("down")
    with pytest.raises(redis.ConnectionError):
        RedisManager(client=redis_client)


def test_health_check(manager):
    manager.set("k", [])
    health = manager.health_check()
    assert health["status"] == "healthy"
    assert health["total_keys"] == 1


def test_close(manager, redis_client):
    manager.close()
    assert redis_client.closed
