"""Reference lookup for cheat-sheet style documentation."""

from cheatsheet_reference.errors import (
    CheatSheetError,
    InvalidQuery,
    MalformedDocument,
    SectionNotFound,
    SourceUnavailable,
)
from cheatsheet_reference.library import ReferenceLibrary
from cheatsheet_reference.models import ReferenceDocument, SearchResult, Section, Snippet, SnippetLanguage

__all__ = [
    "CheatSheetError",
    "InvalidQuery",
    "MalformedDocument",
    "ReferenceDocument",
    "ReferenceLibrary",
    "SearchResult",
    "Section",
    "SectionNotFound",
    "Snippet",
    "SnippetLanguage",
    "SourceUnavailable",
]
