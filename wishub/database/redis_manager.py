"""
Redis Management for WIS Hub.

Thin key-value adapter: every collection lives under one string key as a
JSON-encoded array. There is no logic here beyond encoding, decoding and
turning Redis failures into StoreError.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis

from wishub.errors import StoreError

logger = logging.getLogger(__name__)


class RedisManager:
    """
    Manages all Redis operations for WIS Hub.

    Data Structure:
    - wis-documents -> JSON array of documents (string)
    - wis-ui-structure -> JSON array of UI repository folders (string)
    - wis-api-structure -> JSON array of API repository folders (string)
    - wis-community-posts -> JSON array of posts with embedded comments (string)

    Writes replace the whole value. Concurrent writers to the same key race
    under last-write-wins.
    """

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, decode_responses: bool = True,
                 client: Optional[Any] = None):
        """
        Initialize Redis connection.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            password: Redis password (if required)
            decode_responses: Decode responses to strings
            client: Pre-built client exposing the redis.Redis interface
        """
        self.client = client if client is not None else redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            decode_responses=decode_responses
        )
        self._test_connection()

    def _test_connection(self):
        """Test Redis connection."""
        try:
            self.client.ping()
            logger.info("Redis connection established successfully")
        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    # ==================== KEY-VALUE OPERATIONS ====================

    def get(self, key: str) -> Optional[Any]:
        """
        Read a JSON value.

        Args:
            key: Store key

        Returns:
            The decoded value, or None if the key does not exist
        """
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            raise StoreError(f"Failed to read key {key!r}", details=str(e)) from e

        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode('utf-8')

        try:
            return json.loads(raw)
        except ValueError as e:
            raise StoreError(f"Corrupt value under key {key!r}", details=str(e)) from e

    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under key."""
        try:
            self.client.set(key, json.dumps(value))
        except redis.RedisError as e:
            raise StoreError(f"Failed to write key {key!r}", details=str(e)) from e

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        try:
            return bool(self.client.delete(key))
        except redis.RedisError as e:
            raise StoreError(f"Failed to delete key {key!r}", details=str(e)) from e

    # ==================== UTILITY OPERATIONS ====================

    def health_check(self) -> Dict[str, Any]:
        """Get Redis health status."""
        try:
            info = self.client.info()
            total_keys = self.client.dbsize()
        except redis.RedisError as e:
            raise StoreError("Redis health check failed", details=str(e)) from e
        return {
            "status": "healthy",
            "connected_clients": info.get('connected_clients', 0),
            "used_memory": info.get('used_memory_human', 'unknown'),
            "total_keys": total_keys,
        }

    def close(self):
        """Close Redis connection."""
        self.client.close()
