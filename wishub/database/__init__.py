"""
Database Package for WIS Hub.

Provides the key-value store adapter used by the collection services.
"""

from wishub.database.redis_manager import RedisManager

__all__ = [
    'RedisManager',
]
