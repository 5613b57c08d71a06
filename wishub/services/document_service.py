from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple, Union

from wishub.errors import NotFoundError
from wishub.schema import (
    DEFAULT_CATEGORY,
    CATEGORIES,
    Document,
    DocumentUpdate,
    NewDocument,
    coerce,
    parse_timestamp,
    utc_now_iso,
)
from wishub.services.base import CollectionService
from wishub.utils.file_manager import parse_size

logger = logging.getLogger(__name__)

DOCUMENTS_KEY = "wis-documents"
ITEMS_PER_PAGE = 12
RECENT_DAYS = 7

SortField = Literal["name", "date", "size", "type"]
SortDirection = Literal["asc", "desc"]


class DocumentService(CollectionService[Document]):
    key = DOCUMENTS_KEY
    model = Document

    def list(self) -> List[Document]:
        return self._load()

    def get(self, document_id: str) -> Document:
        for document in self._load():
            if document.id == document_id:
                return document
        raise NotFoundError("Document not found")

    def create(self, payload: Union[Dict[str, Any], NewDocument]) -> Document:
        data = coerce(NewDocument, payload)
        document = Document(
            name=data.name,
            size=data.size,
            type=data.type,
            dataUrl=data.dataUrl,
            uploadedAt=data.uploadedAt or utc_now_iso(),
            category=data.category or DEFAULT_CATEGORY,
            isFavorite=bool(data.isFavorite),
        )

        documents = self._load()
        documents.append(document)
        self._save(documents)
        logger.info(f"Document uploaded: {document.id} ({document.name})")
        return document

    def update(self, document_id: str, partial: Union[Dict[str, Any], DocumentUpdate]) -> Document:
        """Shallow-merge the allowed fields (category, isFavorite) over the stored record."""
        changes = coerce(DocumentUpdate, partial).model_dump(exclude_none=True)

        documents = self._load()
        for index, document in enumerate(documents):
            if document.id == document_id:
                documents[index] = document.model_copy(update=changes)
                self._save(documents)
                return documents[index]
        raise NotFoundError("Document not found")

    def delete(self, document_id: str) -> None:
        documents = self._load()
        remaining = [document for document in documents if document.id != document_id]
        if len(remaining) == len(documents):
            raise NotFoundError("Document not found")
        self._save(remaining)
        logger.info(f"Document deleted: {document_id}")


# ==================== LIBRARY VIEW HELPERS ====================

def filter_documents(
    documents: Iterable[Document],
    *,
    query: str = "",
    category: Optional[str] = None,
    favorites_only: bool = False,
    recent_only: bool = False,
    now: Optional[datetime] = None,
) -> List[Document]:
    """Name search plus category/favorite/recent filters. category None or "All" means any."""
    result = list(documents)

    needle = query.strip().lower()
    if needle:
        result = [doc for doc in result if needle in doc.name.lower()]

    if category and category != "All":
        result = [doc for doc in result if doc.category == category]

    if favorites_only:
        result = [doc for doc in result if doc.isFavorite]

    if recent_only:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=RECENT_DAYS)
        result = [doc for doc in result if _uploaded_since(doc, cutoff)]

    return result


def _uploaded_since(doc: Document, cutoff: datetime) -> bool:
    uploaded = parse_timestamp(doc.uploadedAt)
    return uploaded is not None and uploaded >= cutoff


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sort_key(field: SortField):
    if field == "name":
        return lambda doc: doc.name.casefold()
    if field == "date":
        return lambda doc: parse_timestamp(doc.uploadedAt) or _EPOCH
    if field == "size":
        return lambda doc: parse_size(doc.size)
    if field == "type":
        return lambda doc: (doc.type or "").casefold()
    raise ValueError(f"Unknown sort field: {field!r}")


def sort_documents(
    documents: Iterable[Document],
    field: SortField = "date",
    direction: SortDirection = "desc",
) -> List[Document]:
    return sorted(documents, key=_sort_key(field), reverse=direction == "desc")


def category_counts(documents: Iterable[Document]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for doc in documents:
        category = doc.category or DEFAULT_CATEGORY
        counts[category] = counts.get(category, 0) + 1
    return counts


def paginate(documents: List[Document], page: int, per_page: int = ITEMS_PER_PAGE) -> Tuple[List[Document], int]:
    """Return (items on page, total pages). Pages are 1-based."""
    total_pages = math.ceil(len(documents) / per_page) if documents else 0
    start = (max(page, 1) - 1) * per_page
    return documents[start:start + per_page], total_pages


__all__ = [
    "CATEGORIES",
    "DOCUMENTS_KEY",
    "DocumentService",
    "category_counts",
    "filter_documents",
    "paginate",
    "sort_documents",
]
