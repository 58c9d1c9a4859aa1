"""Query engine answering lookups against reference indexes."""

import heapq
import itertools
from collections.abc import Iterable, Iterator, Sequence

from cheatsheet_reference.errors import InvalidQuery, SectionNotFound
from cheatsheet_reference.index import ReferenceIndex, tokenize
from cheatsheet_reference.models import ReferenceDocument, SearchResult, Section


class SearchResults:
    """Lazy, restartable sequence of ranked search results.

    Ranking runs on every iteration, so iterating twice over the same
    immutable index yields the same results.
    """

    def __init__(self, source: "QueryEngine | Catalog", query: str, limit: int | None = None) -> None:
        self._source = source
        self.query = query
        self.limit = limit

    def __iter__(self) -> Iterator[SearchResult]:
        return itertools.islice(self._source.rank(self.query), self.limit)

    def __repr__(self) -> str:
        return f"SearchResults(query={self.query!r}, limit={self.limit!r})"


class QueryEngine:
    """Answers queries against a single document index."""

    def __init__(self, index: ReferenceIndex) -> None:
        """Initialise engine with an index.

        Args:
            index: Immutable index of one document.
        """
        self.index = index

    @property
    def document(self) -> ReferenceDocument:
        """Return the indexed document."""
        return self.index.document

    def list_sections(self) -> list[str]:
        """Return section titles in document order."""
        return [section.title for section in self.document.sections]

    def show(self, title: str) -> Section:
        """Return the section with the given title.

        An exact match wins; otherwise titles are compared case-insensitively
        and the first such section in document order is returned.

        Args:
            title: Section title.

        Returns:
            The matching Section.

        Raises:
            InvalidQuery: If the title is blank.
            SectionNotFound: If no section has the title.
        """
        title = title.strip()
        if not title:
            msg = "Section title must not be empty"
            raise InvalidQuery(msg)

        section = self.document.section(title)
        if section is not None:
            return section
        folded = title.casefold()
        for candidate in self.document.sections:
            if candidate.title.casefold() == folded:
                return candidate
        raise SectionNotFound(title)

    def search(self, query: str, limit: int | None = None) -> SearchResults:
        """Search snippets by keyword.

        Args:
            query: Free-text query.
            limit: Maximum number of results, or None for all.

        Returns:
            Lazy SearchResults; empty when nothing matches.
        """
        return SearchResults(self, query, limit)

    def rank(self, query: str) -> Iterator[SearchResult]:
        """Yield matching snippets in rank order.

        Snippets of a section whose title tokens equal the query tokens come
        first, then snippets by number of distinct matched query tokens, then
        document order.
        """
        tokens = tokenize(query)
        if not tokens:
            return

        matched: dict[int, set[str]] = {}
        for token in dict.fromkeys(tokens):
            for keyword in self.index.expand(token):
                for position in self.index.lookup(keyword):
                    matched.setdefault(position, set()).add(token)

        title_matches = {section.title for section in self.document.sections if tokenize(section.title) == tokens}

        def sort_key(item: tuple[int, set[str]]) -> tuple[bool, int, int]:
            position, hits = item
            return (self.index.section_for(position).title not in title_matches, -len(hits), position)

        for position, hits in sorted(matched.items(), key=sort_key):
            section = self.index.section_for(position)
            yield SearchResult(
                snippet=self.index.snippets[position],
                section=section.title,
                document=self.document.title,
                title_match=section.title in title_matches,
                score=len(hits),
            )


class Catalog:
    """Every document loaded from one source, each with its own index."""

    def __init__(self, indexes: Iterable[ReferenceIndex]) -> None:
        """Initialise catalog with one engine per index.

        Args:
            indexes: Document indexes in document order.
        """
        self.engines: tuple[QueryEngine, ...] = tuple(QueryEngine(index) for index in indexes)

    def __len__(self) -> int:
        return len(self.engines)

    @property
    def documents(self) -> list[ReferenceDocument]:
        """Return the loaded documents in order."""
        return [engine.document for engine in self.engines]

    def select(self, document: int | None = None) -> Sequence[QueryEngine]:
        """Return the engines a query should run against.

        Args:
            document: 1-based document number, or None for all documents.

        Raises:
            InvalidQuery: If the document number is out of range.
        """
        if document is None:
            return self.engines
        if not 1 <= document <= len(self.engines):
            msg = f"Document {document} does not exist; {len(self.engines)} document(s) loaded"
            raise InvalidQuery(msg)
        return (self.engines[document - 1],)

    def list_sections(self, document: int | None = None) -> list[tuple[ReferenceDocument, list[str]]]:
        """Return section titles grouped by document."""
        return [(engine.document, engine.list_sections()) for engine in self.select(document)]

    def show(self, title: str, document: int | None = None) -> list[tuple[ReferenceDocument, Section]]:
        """Return the matching section of every selected document.

        Raises:
            InvalidQuery: If the title is blank.
            SectionNotFound: If no selected document has the section.
        """
        found = []
        for engine in self.select(document):
            try:
                found.append((engine.document, engine.show(title)))
            except SectionNotFound:
                continue
        if not found:
            raise SectionNotFound(title.strip())
        return found

    def search(self, query: str, limit: int | None = None, document: int | None = None) -> SearchResults:
        """Search every selected document, merging the rankings."""
        if document is None:
            return SearchResults(self, query, limit)
        return self.select(document)[0].search(query, limit)

    def rank(self, query: str) -> Iterator[SearchResult]:
        """Yield results of all documents, ties broken by document order."""
        streams = [_keyed(number, engine.rank(query)) for number, engine in enumerate(self.engines)]
        for _, result in heapq.merge(*streams, key=lambda pair: pair[0]):
            yield result


def _keyed(
    number: int, results: Iterator[SearchResult]
) -> Iterator[tuple[tuple[bool, int, int, int], SearchResult]]:
    """Pair each result with its catalog-wide sort key."""
    for result in results:
        yield (not result.title_match, -result.score, number, result.snippet.position), result
