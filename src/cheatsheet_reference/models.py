"""Data models for cheat-sheet reference documents."""

from dataclasses import dataclass, field
from enum import Enum


class SnippetLanguage(Enum):
    """Recognised families of snippet language tags."""

    SHELL = "shell"
    CODE = "code"
    CONFIG = "config"
    TEMPLATE = "template"
    PLAIN = "plain"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: str | None) -> "SnippetLanguage":
        """Map a free-form fence tag onto a language family.

        Args:
            tag: Tag declared on the code block, e.g. ``bash`` or ``php``.

        Returns:
            Matching SnippetLanguage, PLAIN for a missing tag, OTHER otherwise.
        """
        if not tag:
            return cls.PLAIN
        return _TAG_FAMILIES.get(tag.strip().lower(), cls.OTHER)


_TAG_FAMILIES: dict[str, SnippetLanguage] = {
    **dict.fromkeys(
        ("sh", "bash", "zsh", "shell", "console", "shell-session", "powershell", "ps1", "cmd", "bat", "fish"),
        SnippetLanguage.SHELL,
    ),
    **dict.fromkeys(
        (
            "code",
            "php",
            "python",
            "py",
            "javascript",
            "js",
            "typescript",
            "ts",
            "jsx",
            "tsx",
            "ruby",
            "rb",
            "go",
            "java",
            "kotlin",
            "c",
            "cpp",
            "csharp",
            "cs",
            "rust",
            "sql",
            "swift",
        ),
        SnippetLanguage.CODE,
    ),
    **dict.fromkeys(
        ("config", "env", "dotenv", "ini", "cfg", "conf", "toml", "yaml", "yml", "json", "xml", "properties", "nginx"),
        SnippetLanguage.CONFIG,
    ),
    **dict.fromkeys(
        ("template", "blade", "html", "jinja", "jinja2", "twig", "erb", "handlebars", "hbs", "vue", "markdown", "md"),
        SnippetLanguage.TEMPLATE,
    ),
    **dict.fromkeys(("text", "txt", "plain", "plaintext"), SnippetLanguage.PLAIN),
}


@dataclass(frozen=True)
class Snippet:
    """A labelled example block inside a section."""

    tag: str
    language: SnippetLanguage
    text: str
    position: int
    description: str | None = None
    line: int | None = None


@dataclass(frozen=True)
class Section:
    """A titled group of snippets."""

    title: str
    ordinal: int
    snippets: tuple[Snippet, ...] = ()
    line: int | None = None


@dataclass(frozen=True)
class ReferenceDocument:
    """A parsed cheat sheet: ordered sections and their snippets."""

    title: str
    source: str
    ordinal: int
    sections: tuple[Section, ...] = field(default_factory=tuple)

    @property
    def snippets(self) -> tuple[Snippet, ...]:
        """Return every snippet in document order."""
        return tuple(snippet for section in self.sections for snippet in section.snippets)

    def section(self, title: str) -> Section | None:
        """Return the section with the given title, if any."""
        for section in self.sections:
            if section.title == title:
                return section
        return None

    def section_of(self, snippet: Snippet) -> Section:
        """Return the section owning a snippet.

        Raises:
            KeyError: If the snippet does not belong to this document.
        """
        for section in self.sections:
            if any(owned is snippet for owned in section.snippets):
                return section
        raise KeyError(snippet.position)


@dataclass(frozen=True)
class SearchResult:
    """Represents a search result."""

    snippet: Snippet
    section: str
    document: str
    title_match: bool
    score: int
