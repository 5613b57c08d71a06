from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Tuple

from wishub.schema import Document, FolderInfo, Post, parse_timestamp
from wishub.search.snippet import Snippet, highlighted_snippet

MAX_RESULTS = 10

ResultType = Literal["folder", "document", "discussion"]
Page = Literal["structure", "documents", "community"]

_FOLDER_FALLBACK = {
    "ui": "UI Test Automation Folder",
    "api": "API Test Automation Folder",
}


@dataclass(frozen=True)
class SearchSnapshot:
    """Client-side copy of all four collections, replaced as a whole on refresh."""
    ui_folders: Tuple[FolderInfo, ...] = ()
    api_folders: Tuple[FolderInfo, ...] = ()
    documents: Tuple[Document, ...] = ()
    discussions: Tuple[Post, ...] = ()


@dataclass(frozen=True)
class NavigationAction:
    page: Page
    repo: Optional[str] = None
    folder_name: Optional[str] = None
    post_id: Optional[str] = None


@dataclass(frozen=True)
class SearchResult:
    type: ResultType
    title: str
    description: str
    action: NavigationAction
    snippet: Optional[Snippet] = None
    repo: Optional[str] = None


def _contains(text: Optional[str], needle: str) -> bool:
    return bool(text) and needle in text.lower()


def _folder_results(folders: Sequence[FolderInfo], repo: str, query: str, needle: str) -> List[SearchResult]:
    results = []
    for folder in folders:
        # snippet comes from the first body field holding the query; a name-only hit gets none
        body = next((text for text in (folder.purpose, folder.description) if _contains(text, needle)), None)
        if body is None and not _contains(folder.name, needle):
            continue
        results.append(SearchResult(
            type="folder",
            title=folder.name,
            description=folder.purpose or _FOLDER_FALLBACK[repo],
            snippet=highlighted_snippet(body, query) if body else None,
            repo=repo,
            action=NavigationAction(page="structure", repo=repo, folder_name=folder.name),
        ))
    return results


def _document_results(documents: Sequence[Document], needle: str) -> List[SearchResult]:
    results = []
    for document in documents:
        if not _contains(document.name, needle):
            continue
        uploaded = parse_timestamp(document.uploadedAt)
        results.append(SearchResult(
            type="document",
            title=document.name,
            description=f"Uploaded {uploaded.date().isoformat()}" if uploaded else "Uploaded",
            action=NavigationAction(page="documents"),
        ))
    return results


def _discussion_results(posts: Sequence[Post], query: str, needle: str) -> List[SearchResult]:
    results = []
    for post in posts:
        comment_count = len(post.comments)
        matched_text = ""
        reason = ""

        if _contains(post.message, needle):
            matched_text = post.message
            reason = f"In post • {comment_count} comments"
        else:
            for comment in post.comments:
                if _contains(comment.message, needle):
                    matched_text = comment.message
                    reason = f"In comment by {comment.name}"
                    break
                if _contains(comment.name, needle):
                    matched_text = comment.message or f"Comment by {comment.name}"
                    reason = f"Comment author: {comment.name}"
                    break

        if not matched_text and not _contains(post.name, needle):
            continue
        results.append(SearchResult(
            type="discussion",
            title=post.name or "Untitled",
            description=reason or f"{comment_count} comments",
            snippet=highlighted_snippet(matched_text, query) if matched_text else None,
            action=NavigationAction(page="community", post_id=post.id),
        ))
    return results


def search(query: str, snapshot: SearchSnapshot, limit: int = MAX_RESULTS) -> List[SearchResult]:
    """Case-insensitive substring search across the snapshot.

    Results keep collection order (UI folders, API folders, documents,
    discussions) and array order within each; there is no relevance ranking.
    An empty or blank query yields no results.
    """
    if not query or not query.strip():
        return []
    needle = query.lower()

    results: List[SearchResult] = []
    results.extend(_folder_results(snapshot.ui_folders, "ui", query, needle))
    results.extend(_folder_results(snapshot.api_folders, "api", query, needle))
    results.extend(_document_results(snapshot.documents, needle))
    results.extend(_discussion_results(snapshot.discussions, query, needle))
    return results[:limit]
