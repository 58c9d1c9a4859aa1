"""Parser for cheat-sheet documents written in Markdown or reStructuredText."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import docutils.frontend  # type: ignore[import-untyped]
import docutils.nodes  # type: ignore[import-untyped]
import docutils.parsers.rst  # type: ignore[import-untyped]
import docutils.utils  # type: ignore[import-untyped]

from cheatsheet_reference.errors import MalformedDocument, SourceUnavailable
from cheatsheet_reference.models import ReferenceDocument, Section, Snippet, SnippetLanguage

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")
RST_SUFFIXES = (".rst", ".rest")

_HEADING = re.compile(r"^ {0,3}(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_FENCE_OPEN = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_FENCE_CLOSE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})[ \t]*$")


@dataclass
class _SnippetDraft:
    tag: str
    text: str
    description: str | None
    line: int | None


@dataclass
class _SectionDraft:
    title: str
    line: int | None
    snippets: list[_SnippetDraft] = field(default_factory=list)


@dataclass
class _DocumentDraft:
    """Mutable accumulator for one document while its source is scanned."""

    title: str
    line: int | None
    preamble: list[_SnippetDraft] = field(default_factory=list)
    sections: list[_SectionDraft] = field(default_factory=list)
    _seen: dict[str, int | None] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Return True when the draft holds no sections and no snippets."""
        return not self.preamble and not self.sections

    def current(self) -> list[_SnippetDraft]:
        """Return the snippet list new blocks are appended to."""
        return self.sections[-1].snippets if self.sections else self.preamble

    def current_title(self) -> str:
        """Return the title of the section being filled, for error reports."""
        return self.sections[-1].title if self.sections else self.title

    def open_section(self, title: str, line: int | None) -> None:
        """Start a new section, enforcing unique titles."""
        self._claim(title, line)
        self.sections.append(_SectionDraft(title=title, line=line))

    def _claim(self, title: str, line: int | None) -> None:
        """Reserve a section title.

        Args:
            title: Section title.
            line: Line of the heading introducing it.

        Raises:
            MalformedDocument: If the title is already used in this document.
        """
        if title in self._seen:
            first = self._seen[title]
            where = f", first defined on line {first}" if first is not None else ""
            msg = f"Duplicate section title in document {self.title!r}{where}"
            raise MalformedDocument(msg, line=line, section=title)
        self._seen[title] = line

    def build(self, source: str, ordinal: int) -> ReferenceDocument:
        """Freeze the draft into an immutable document.

        Snippets seen before the first section go into a leading section
        named after the document.
        """
        drafts = list(self.sections)
        if self.preamble:
            self._claim(self.title, self.line)
            drafts.insert(0, _SectionDraft(title=self.title, line=self.line, snippets=self.preamble))

        position = 0
        sections = []
        for section_ordinal, draft in enumerate(drafts):
            snippets = []
            for snippet in draft.snippets:
                snippets.append(
                    Snippet(
                        tag=snippet.tag,
                        language=SnippetLanguage.from_tag(snippet.tag),
                        text=snippet.text,
                        position=position,
                        description=snippet.description,
                        line=snippet.line,
                    )
                )
                position += 1
            sections.append(
                Section(title=draft.title, ordinal=section_ordinal, snippets=tuple(snippets), line=draft.line)
            )
        return ReferenceDocument(title=self.title, source=source, ordinal=ordinal, sections=tuple(sections))


class SnippetVisitor(docutils.nodes.GenericNodeVisitor):  # type: ignore[misc]
    """Visitor collecting sections and literal blocks from an RST document tree."""

    def __init__(self, document: docutils.nodes.document) -> None:
        """Initialise snippet visitor.

        Args:
            document: Docutils document tree.
        """
        super().__init__(document)
        self.sections: list[tuple[int, _SectionDraft]] = []
        self.preamble: list[_SnippetDraft] = []
        self._stack: list[_SectionDraft] = []

    def visit_section(self, node: docutils.nodes.section) -> None:
        """Open a section named by its title child.

        Args:
            node: Section node.
        """
        title = node[0].astext() if len(node) and isinstance(node[0], docutils.nodes.title) else ""
        draft = _SectionDraft(title=title.strip(), line=node[0].line if len(node) else None)
        self.sections.append((len(self._stack), draft))
        self._stack.append(draft)

    def depart_section(self, node: docutils.nodes.section) -> None:
        """Close the innermost section.

        Args:
            node: Section node.
        """
        self._stack.pop()

    def visit_literal_block(self, node: docutils.nodes.literal_block) -> None:
        """Record a literal block as a snippet of the enclosing section.

        Args:
            node: Literal block node.

        Raises:
            docutils.nodes.SkipNode: Always raised, block text is taken whole.
        """
        classes = [name for name in node.get("classes", []) if name != "code"]
        snippet = _SnippetDraft(
            tag=classes[0] if classes else "",
            text=node.astext().rstrip("\n"),
            description=self._description_for(node),
            line=node.line,
        )
        target = self._stack[-1].snippets if self._stack else self.preamble
        target.append(snippet)
        raise docutils.nodes.SkipNode

    @staticmethod
    def _description_for(node: docutils.nodes.Node) -> str | None:
        parent = node.parent
        if parent is None:
            return None
        index = parent.index(node)
        if index > 0 and isinstance(parent[index - 1], docutils.nodes.paragraph):
            lines = [line.strip() for line in parent[index - 1].astext().splitlines() if line.strip()]
            return lines[-1] if lines else None
        return None

    def default_visit(self, node: docutils.nodes.Node) -> None:
        """Default visit handler (no-op).

        Args:
            node: Any node.
        """

    def default_departure(self, node: docutils.nodes.Node) -> None:
        """Default departure handler (no-op).

        Args:
            node: Any node.
        """


class DocumentParser:
    """Parses cheat-sheet text into reference documents."""

    def parse_file(self, file_path: Path) -> list[ReferenceDocument]:
        """Parse a Markdown or RST file.

        Args:
            file_path: Path to the source file.

        Returns:
            Documents found in the file, in source order.

        Raises:
            SourceUnavailable: If the file cannot be read or decoded.
            MalformedDocument: If the file structure is invalid.
        """
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Cannot read {file_path}: {exc}"
            raise SourceUnavailable(msg, path=str(file_path)) from exc

        if file_path.suffix.lower() in RST_SUFFIXES:
            documents = [self.parse_rst(source, str(file_path))]
        else:
            documents = self.parse_text(source, str(file_path))
        logger.debug("Parsed %d document(s) from %s", len(documents), file_path)
        return documents

    def parse_text(self, text: str, source: str = "<string>") -> list[ReferenceDocument]:
        """Parse Markdown text.

        A level-1 heading starts a new document, deeper headings start
        sections, fenced code blocks become snippets.

        Args:
            text: Markdown source text.
            source: Name of the source, used for fallback titles and errors.

        Returns:
            Documents in source order.

        Raises:
            MalformedDocument: On an unterminated fence or a duplicate section title.
        """
        drafts = [_DocumentDraft(title=self._fallback_title(source), line=None)]
        last_prose: str | None = None
        fence: tuple[str, int, int, str] | None = None  # char, length, indent, tag
        fence_line = 0
        fence_description: str | None = None
        fence_body: list[str] = []

        for number, line in enumerate(text.splitlines(), start=1):
            document = drafts[-1]
            if fence is not None:
                closing = _FENCE_CLOSE.match(line)
                char, length, indent, tag = fence
                if closing and closing["fence"][0] == char and len(closing["fence"]) >= length:
                    snippet = _SnippetDraft(
                        tag=tag, text="\n".join(fence_body), description=fence_description, line=fence_line
                    )
                    document.current().append(snippet)
                    fence = None
                else:
                    fence_body.append(self._dedent(line, indent))
                continue

            opening = _FENCE_OPEN.match(line)
            if opening and not (opening["fence"][0] == "`" and "`" in opening["info"]):
                info = opening["info"].strip()
                tag = info.split()[0] if info else ""
                fence = (opening["fence"][0], len(opening["fence"]), len(opening["indent"]), tag)
                fence_line = number
                fence_description = last_prose
                fence_body = []
                last_prose = None
                continue

            heading = _HEADING.match(line)
            if heading:
                level, title = len(heading[1]), heading[2].strip()
                if level == 1:
                    drafts.append(_DocumentDraft(title=title, line=number))
                else:
                    document.open_section(title, number)
                last_prose = None
            elif line.strip():
                last_prose = line.strip()

        if fence is not None:
            msg = "Unterminated fenced code block"
            raise MalformedDocument(msg, line=fence_line, section=drafts[-1].current_title())

        if drafts[0].is_empty and len(drafts) > 1:
            drafts.pop(0)
        return [draft.build(source, ordinal) for ordinal, draft in enumerate(drafts)]

    def parse_rst(self, text: str, source: str = "<string>") -> ReferenceDocument:
        """Parse reStructuredText into a single document.

        A lone top-level section names the document; otherwise the title
        falls back to the source name.

        Args:
            text: RST source text.
            source: Name of the source.

        Returns:
            The parsed document.

        Raises:
            MalformedDocument: On a duplicate section title or a severe RST error.
        """
        try:
            doctree = self._parse_rst(text, source)
        except docutils.utils.SystemMessage as exc:
            msg = f"Invalid reStructuredText: {exc}"
            raise MalformedDocument(msg) from exc

        visitor = SnippetVisitor(doctree)
        doctree.walkabout(visitor)

        top_level = [draft for depth, draft in visitor.sections if depth == 0]
        if len(top_level) == 1 and not visitor.preamble:
            root = top_level[0]
            document = _DocumentDraft(title=root.title, line=root.line, preamble=root.snippets)
            nested = [draft for depth, draft in visitor.sections if depth > 0]
        else:
            document = _DocumentDraft(title=self._fallback_title(source), line=None, preamble=visitor.preamble)
            nested = [draft for _, draft in visitor.sections]

        for draft in nested:
            document.open_section(draft.title, draft.line)
            document.sections[-1].snippets.extend(draft.snippets)
        return document.build(source, 0)

    def _parse_rst(self, source: str, source_path: str) -> docutils.nodes.document:
        """Parse RST source into docutils document tree.

        Args:
            source: RST source text.
            source_path: Path of the source (for error reporting).

        Returns:
            Docutils document tree.
        """
        parser = docutils.parsers.rst.Parser()
        settings = docutils.frontend.get_default_settings(docutils.parsers.rst.Parser)
        settings.report_level = 5  # Suppress warnings
        settings.file_insertion_enabled = False
        settings.raw_enabled = False
        document = docutils.utils.new_document(source_path, settings)
        parser.parse(source, document)
        return document

    @staticmethod
    def _fallback_title(source: str) -> str:
        """Derive a document title from the source name."""
        if source.startswith("<"):
            return "Untitled"
        stem = Path(source).stem
        return stem.replace("-", " ").replace("_", " ").title() or "Untitled"

    @staticmethod
    def _dedent(line: str, indent: int) -> str:
        """Remove up to ``indent`` leading whitespace characters."""
        stripped = 0
        while stripped < indent and stripped < len(line) and line[stripped] in " \t":
            stripped += 1
        return line[stripped:]
