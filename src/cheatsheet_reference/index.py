"""Keyword index over the snippets of a reference document."""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from cheatsheet_reference.models import ReferenceDocument, Section, Snippet

MIN_TOKEN_LENGTH = 2

_TOKEN = re.compile(r"[^\W_]+")


def tokenize(text: str) -> list[str]:
    """Split text into lowercase alphanumeric tokens.

    Underscores and punctuation are boundaries; tokens shorter than two
    characters are dropped. Order and duplicates are preserved.

    Args:
        text: Any text.

    Returns:
        List of tokens.
    """
    return [token for token in _TOKEN.findall(text.lower()) if len(token) >= MIN_TOKEN_LENGTH]


@dataclass(frozen=True)
class ReferenceIndex:
    """Immutable keyword index for one document.

    ``keywords`` maps a token to the positions of the snippets whose
    section title, text or description contains it.
    """

    document: ReferenceDocument
    keywords: Mapping[str, frozenset[int]]
    snippets: tuple[Snippet, ...]
    owners: tuple[Section, ...]

    def lookup(self, keyword: str) -> frozenset[int]:
        """Return snippet positions for an exact keyword."""
        return self.keywords.get(keyword, frozenset())

    def expand(self, token: str) -> frozenset[str]:
        """Return the indexed keywords a query token matches.

        An exact keyword matches itself; otherwise every keyword starting
        with the token matches.
        """
        if token in self.keywords:
            return frozenset((token,))
        return frozenset(keyword for keyword in self.keywords if keyword.startswith(token))

    def section_for(self, position: int) -> Section:
        """Return the section owning the snippet at a position."""
        return self.owners[position]


def build_index(document: ReferenceDocument) -> ReferenceIndex:
    """Build the keyword index for a parsed document.

    Args:
        document: Parsed document.

    Returns:
        Immutable ReferenceIndex.
    """
    keywords: dict[str, set[int]] = {}
    snippets: list[Snippet] = []
    owners: list[Section] = []

    for section in document.sections:
        title_tokens = set(tokenize(section.title))
        for snippet in section.snippets:
            snippets.append(snippet)
            owners.append(section)
            tokens = title_tokens | set(tokenize(snippet.text))
            if snippet.description:
                tokens |= set(tokenize(snippet.description))
            for token in tokens:
                keywords.setdefault(token, set()).add(snippet.position)

    frozen = {token: frozenset(positions) for token, positions in sorted(keywords.items())}
    return ReferenceIndex(
        document=document,
        keywords=MappingProxyType(frozen),
        snippets=tuple(snippets),
        owners=tuple(owners),
    )
