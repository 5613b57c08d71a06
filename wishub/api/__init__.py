"""REST API for WIS Hub."""

from wishub.api.main import create_app

__all__ = ["create_app"]
