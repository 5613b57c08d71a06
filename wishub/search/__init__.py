from wishub.search.query import (
    MAX_RESULTS,
    NavigationAction,
    SearchResult,
    SearchSnapshot,
    search,
)
from wishub.search.snippet import Snippet, SnippetPart, highlighted_snippet

__all__ = [
    'MAX_RESULTS',
    'NavigationAction',
    'SearchResult',
    'SearchSnapshot',
    'Snippet',
    'SnippetPart',
    'highlighted_snippet',
    'search',
]
