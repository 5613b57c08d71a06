from datetime import datetime, timedelta, timezone

import pytest

from wishub.errors import NotFoundError, ValidationError
from wishub.schema import Document
from wishub.services.document_service import (
    DOCUMENTS_KEY,
    category_counts,
    filter_documents,
    paginate,
    sort_documents,
)


def _upload(documents, name="plan.pdf", **extra):
    payload = {"name": name, "size": "12.3 KB", "type": "application/pdf",
               "dataUrl": "data:application/pdf;base64,AAAA"}
    payload.update(extra)
    return documents.create(payload)


def test_create_assigns_id_and_defaults(documents):
    document = _upload(documents)

    assert document.id
    assert document.category == "Uncategorized"
    assert document.isFavorite is False
    assert document.uploadedAt.endswith("Z")
    assert documents.list() == [document]


def test_create_keeps_supplied_upload_time_and_category(documents):
    document = _upload(documents, uploadedAt="2024-05-01T10:00:00.000Z", category="Reports", isFavorite=True)

    assert document.uploadedAt == "2024-05-01T10:00:00.000Z"
    assert document.category == "Reports"
    assert document.isFavorite is True


def test_client_supplied_id_is_ignored(documents):
    document = _upload(documents, id="mine")
    assert document.id != "mine"


def test_ids_are_unique(documents):
    ids = {_upload(documents, name=f"doc-{i}.txt").id for i in range(25)}
    assert len(ids) == 25


def test_unknown_category_is_rejected(documents):
    with pytest.raises(ValidationError):
        _upload(documents, category="Recipes")
    assert documents.list() == []


def test_create_preserves_insertion_order(documents):
    names = ["a.txt", "b.txt", "c.txt"]
    for name in names:
        _upload(documents, name=name)
    assert [doc.name for doc in documents.list()] == names


def test_favorite_update_touches_only_that_document(documents):
    first = _upload(documents, name="first.txt")
    second = _upload(documents, name="second.txt")

    updated = documents.update(second.id, {"isFavorite": True})

    listed = documents.list()
    assert [doc.isFavorite for doc in listed] == [False, True]
    assert listed[0] == first
    assert updated == listed[1]
    assert updated.model_dump(exclude={"isFavorite"}) == second.model_dump(exclude={"isFavorite"})


def test_update_ignores_id_and_unknown_fields(documents):
    document = _upload(documents)

    updated = documents.update(document.id, {"id": "other", "name": "renamed.pdf", "category": "Other"})

    assert updated.id == document.id
    assert updated.name == document.name
    assert updated.category == "Other"


def test_update_unknown_id(documents):
    with pytest.raises(NotFoundError):
        documents.update("missing", {"isFavorite": True})


def test_delete(documents):
    keep = _upload(documents, name="keep.txt")
    drop = _upload(documents, name="drop.txt")

    documents.delete(drop.id)

    assert documents.list() == [keep]


def test_delete_unknown_id_leaves_collection_unchanged(documents, redis_client):
    _upload(documents)
    before = redis_client.data[DOCUMENTS_KEY]

    with pytest.raises(NotFoundError):
        documents.delete("missing")

    assert redis_client.data[DOCUMENTS_KEY] == before


def test_get(documents):
    document = _upload(documents)
    assert documents.get(document.id) == document
    with pytest.raises(NotFoundError):
        documents.get("missing")


def _doc(name, size="1 KB", type="text/plain", uploaded="2024-01-01T00:00:00.000Z", **extra):
    return Document(name=name, size=size, type=type, dataUrl="data:,", uploadedAt=uploaded, **extra)


def test_filter_documents():
    now = datetime(2024, 6, 10, tzinfo=timezone.utc)
    recent = (now - timedelta(days=2)).isoformat()
    docs = [
        _doc("Test Plan.docx", category="Test Plans", uploaded=recent),
        _doc("notes.txt", isFavorite=True),
        _doc("plan-b.pdf", category="Test Plans"),
    ]

    assert [d.name for d in filter_documents(docs, query="PLAN")] == ["Test Plan.docx", "plan-b.pdf"]
    assert [d.name for d in filter_documents(docs, category="Test Plans")] == ["Test Plan.docx", "plan-b.pdf"]
    assert filter_documents(docs, category="All") == docs
    assert [d.name for d in filter_documents(docs, favorites_only=True)] == ["notes.txt"]
    assert [d.name for d in filter_documents(docs, recent_only=True, now=now)] == ["Test Plan.docx"]


def test_sort_documents():
    docs = [
        _doc("b.txt", size="2 MB", type="text/plain", uploaded="2024-01-02T00:00:00Z"),
        _doc("A.txt", size="900 KB", type="application/pdf", uploaded="2024-01-03T00:00:00Z"),
        _doc("c.txt", size="5 Bytes", type="image/png", uploaded="2024-01-01T00:00:00Z"),
    ]

    assert [d.name for d in sort_documents(docs, "name", "asc")] == ["A.txt", "b.txt", "c.txt"]
    assert [d.name for d in sort_documents(docs)] == ["A.txt", "b.txt", "c.txt"]
    assert [d.name for d in sort_documents(docs, "size", "desc")] == ["b.txt", "A.txt", "c.txt"]
    assert [d.name for d in sort_documents(docs, "type", "asc")] == ["A.txt", "c.txt", "b.txt"]


def test_category_counts():
    docs = [_doc("a"), _doc("b", category="Reports"), _doc("c", category="Reports")]
    assert category_counts(docs) == {"Uncategorized": 1, "Reports": 2}


def test_paginate():
    docs = [_doc(f"{i}.txt") for i in range(25)]
    page, total = paginate(docs, 3)
    assert total == 3
    assert [d.name for d in page] == ["24.txt"]
    assert len(paginate(docs, 1)[0]) == 12
    assert paginate([], 1) == ([], 0)
