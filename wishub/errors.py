"""
Error types shared by the repositories, the REST layer and the API client.

Every error renders to the same JSON envelope: ``{"error": ..., "details": ...}``.
"""

from typing import Any, Dict, Optional


class WisError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(WisError):
    """Missing or malformed request fields."""
    status_code = 400


class UnauthorizedError(WisError):
    status_code = 401


class NotFoundError(WisError):
    status_code = 404


class StoreError(WisError):
    """The key-value store failed or returned something unreadable."""
    status_code = 500


class ApiError(Exception):
    """Raised by the HTTP client for non-2xx responses and transport failures."""

    def __init__(self, status_code: Optional[int], error: str, details: Optional[str] = None) -> None:
        super().__init__(f"{status_code}: {error}" if status_code else error)
        self.status_code = status_code
        self.error = error
        self.details = details
