"""
WIS Hub.

Document library, project structure notes, community discussions and a
global search box, all stored as JSON collections in Redis.
"""

__version__ = "0.1.0"
