from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from wishub.config import Settings
from wishub.errors import ApiError
from wishub.schema import Comment, Document, FolderInfo, Post

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class WisClient:
    """HTTP client for the WIS Hub REST API. Every failure surfaces as ApiError; nothing is retried."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http or httpx.Client(timeout=timeout)
        self._owns_http = http is None
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "WisClient":
        return cls(settings.base_url, settings.api_token)

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self.http.request(method, f"{self.base_url}{path}", json=json, headers=self.headers)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(None, f"{method} {path} failed", details=str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error:
            error = body.get("error") or response.reason_phrase or "Request failed"
            logger.error(f"{method} {path} -> {response.status_code}: {error}")
            raise ApiError(response.status_code, error, body.get("details"))
        return body

    @staticmethod
    def _parse(model: Type[M], item: Any) -> M:
        try:
            return model.model_validate(item)
        except PydanticValidationError as e:
            raise ApiError(None, f"Unexpected {model.__name__} payload", details=str(e)) from e

    def _parse_list(self, model: Type[M], items: Any) -> List[M]:
        if items is None:
            return []
        if not isinstance(items, list):
            raise ApiError(None, f"Expected a list of {model.__name__}")
        return [self._parse(model, item) for item in items]

    def health(self) -> bool:
        try:
            return self._request("GET", "/health").get("status") == "ok"
        except ApiError:
            return False

    # ==================== DOCUMENTS ====================

    def list_documents(self) -> List[Document]:
        body = self._request("GET", "/documents")
        return self._parse_list(Document, body.get("documents"))

    def upload_document(self, document: Dict[str, Any]) -> Document:
        body = self._request("POST", "/documents", json=document)
        return self._parse(Document, body.get("document"))

    def update_document(self, document_id: str, *, category: Optional[str] = None,
                        is_favorite: Optional[bool] = None) -> Document:
        updates: Dict[str, Any] = {}
        if category is not None:
            updates["category"] = category
        if is_favorite is not None:
            updates["isFavorite"] = is_favorite
        body = self._request("PUT", f"/documents/{document_id}", json=updates)
        return self._parse(Document, body.get("document"))

    def delete_document(self, document_id: str) -> None:
        self._request("DELETE", f"/documents/{document_id}")

    # ==================== PROJECT STRUCTURE ====================

    def get_structure(self, repo: str) -> List[FolderInfo]:
        body = self._request("GET", f"/structure/{repo}")
        return self._parse_list(FolderInfo, body.get("structure"))

    def update_structure(self, repo: str, folders: Sequence[FolderInfo]) -> None:
        payload = [folder.model_dump(exclude_none=True) for folder in folders]
        self._request("POST", f"/structure/{repo}", json={"structure": payload})

    # ==================== COMMUNITY ====================

    def list_posts(self) -> List[Post]:
        body = self._request("GET", "/community/posts")
        return self._parse_list(Post, body.get("posts"))

    def create_post(self, name: str, message: str,
                    attachments: Optional[Iterable[Dict[str, Any]]] = None) -> Post:
        body = self._request("POST", "/community/posts", json={
            "name": name,
            "message": message,
            "attachments": list(attachments or []),
        })
        return self._parse(Post, body.get("post"))

    def add_comment(self, post_id: str, name: str, message: str,
                    attachments: Optional[Iterable[Dict[str, Any]]] = None) -> Comment:
        body = self._request("POST", f"/community/posts/{post_id}/comments", json={
            "name": name,
            "message": message,
            "attachments": list(attachments or []),
        })
        return self._parse(Comment, body.get("comment"))

    def delete_comment(self, post_id: str, comment_id: str) -> None:
        self._request("DELETE", f"/community/posts/{post_id}/comments/{comment_id}")

    def delete_post(self, post_id: str) -> None:
        self._request("DELETE", f"/community/posts/{post_id}")

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "WisClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
