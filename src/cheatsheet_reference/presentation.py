"""Rendering of snippets and documents for terminal or API output."""

import json
import re
from collections.abc import Iterable

from cheatsheet_reference.models import ReferenceDocument, SearchResult, Section, Snippet, SnippetLanguage

OUTPUT_FORMATS = ("text", "markdown", "json")

LANGUAGE_LABELS: dict[SnippetLanguage, str] = {
    SnippetLanguage.SHELL: "shell",
    SnippetLanguage.CODE: "code",
    SnippetLanguage.CONFIG: "config",
    SnippetLanguage.TEMPLATE: "template",
    SnippetLanguage.PLAIN: "text",
    SnippetLanguage.OTHER: "other",
}

_BACKTICK_RUN = re.compile(r"`{3,}")


def fence_for(text: str) -> str:
    """Return a backtick fence longer than any fence inside ``text``."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=2)
    return "`" * max(3, longest + 1)


class SnippetRenderer:
    """Formats matched snippets without ever executing them."""

    def __init__(self, output_format: str = "text") -> None:
        """Initialise renderer.

        Args:
            output_format: One of ``text``, ``markdown`` or ``json``.

        Raises:
            ValueError: If the format is unknown.
        """
        if output_format not in OUTPUT_FORMATS:
            msg = f"Unknown output format: {output_format!r} (expected one of {', '.join(OUTPUT_FORMATS)})"
            raise ValueError(msg)
        self.output_format = output_format

    def render_snippet(self, snippet: Snippet) -> str:
        """Render a single snippet.

        Args:
            snippet: Snippet to render.

        Returns:
            Rendered text.
        """
        if self.output_format == "json":
            return json.dumps(self._as_dict(snippet), indent=2)
        if self.output_format == "markdown":
            fence = fence_for(snippet.text)
            block = f"{fence}{snippet.tag}\n{snippet.text}\n{fence}"
            return f"{snippet.description}\n\n{block}" if snippet.description else block

        label = LANGUAGE_LABELS[snippet.language]
        header = f"[{label}:{snippet.tag}]" if snippet.tag else f"[{label}]"
        if snippet.description:
            header = f"{header} {snippet.description}"
        return f"{header}\n{snippet.text}"

    def render_section(self, section: Section, document: ReferenceDocument | None = None) -> str:
        """Render a section heading followed by its snippets."""
        if self.output_format == "json":
            entries = [self._as_dict(snippet, section.title, document) for snippet in section.snippets]
            return json.dumps(entries, indent=2)
        heading = f"## {section.title}" if self.output_format == "markdown" else section.title
        if document is not None and self.output_format == "text":
            heading = f"{document.title} / {section.title}"
        parts = [heading]
        parts.extend(self.render_snippet(snippet) for snippet in section.snippets)
        return "\n\n".join(parts)

    def render_results(self, results: Iterable[SearchResult]) -> str:
        """Render ranked search results; empty string when there are none."""
        results = list(results)
        if self.output_format == "json":
            entries = []
            for result in results:
                entry = self._as_dict(result.snippet, result.section)
                entry["document"] = result.document
                entry["score"] = result.score
                entry["title_match"] = result.title_match
                entries.append(entry)
            return json.dumps(entries, indent=2) if entries else "[]"

        blocks = []
        for result in results:
            if self.output_format == "markdown":
                prefix = f"## {result.section}"
            else:
                prefix = f"{result.document} / {result.section}"
            blocks.append(f"{prefix}\n\n{self.render_snippet(result.snippet)}")
        return "\n\n".join(blocks)

    def render_titles(self, titles: Iterable[str]) -> str:
        """Render section titles, one per line."""
        titles = list(titles)
        if self.output_format == "json":
            return json.dumps(titles, indent=2)
        if self.output_format == "markdown":
            return "\n".join(f"- {title}" for title in titles)
        return "\n".join(titles)

    @staticmethod
    def _as_dict(
        snippet: Snippet, section: str | None = None, document: ReferenceDocument | None = None
    ) -> dict[str, object]:
        """Convert a snippet to a JSON-ready mapping.

        Args:
            snippet: Snippet to convert.
            section: Owning section title, included when given.
            document: Owning document, its title included when given.

        Returns:
            Mapping of snippet fields.
        """
        entry: dict[str, object] = {}
        if document is not None:
            entry["document"] = document.title
        if section is not None:
            entry["section"] = section
        entry.update(
            {
                "tag": snippet.tag,
                "language": snippet.language.value,
                "description": snippet.description,
                "text": snippet.text,
                "line": snippet.line,
            }
        )
        return entry


def render_document(document: ReferenceDocument) -> str:
    """Serialise a document back to Markdown.

    The output parses into the same section order and snippet tags.

    Args:
        document: Parsed document.

    Returns:
        Markdown text.
    """
    renderer = SnippetRenderer("markdown")
    parts = [f"# {document.title}"]
    for section in document.sections:
        parts.append(f"## {section.title}")
        parts.extend(renderer.render_snippet(snippet) for snippet in section.snippets)
    return "\n\n".join(parts) + "\n"
