"""Command-line interface for querying cheat-sheet references."""

import argparse
import logging
import sys
from pathlib import Path

from cheatsheet_reference.config import LOG_LEVELS, Settings
from cheatsheet_reference.errors import InvalidQuery, MalformedDocument, SourceUnavailable
from cheatsheet_reference.library import ReferenceLibrary
from cheatsheet_reference.presentation import OUTPUT_FORMATS, SnippetRenderer
from cheatsheet_reference.query import Catalog

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MALFORMED = 1
EXIT_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its three query subcommands.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="cheatsheet-reference",
        description="Look up sections and snippets in cheat-sheet documents.",
    )
    parser.add_argument("--source", type=Path, help="Markdown/RST file or directory (env: CHEATSHEET_SOURCE)")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, dest="output_format", help="Output format")
    parser.add_argument("--document", type=int, help="Restrict to the N-th document (1-based)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, type=str.upper, help="Logging level")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list-sections", help="List section titles in document order")

    show = commands.add_parser("show", help="Show every snippet of a section")
    show.add_argument("title", nargs="+", help="Exact section title")

    search = commands.add_parser("search", help="Search snippets by keyword")
    search.add_argument("keywords", nargs="+", help="Keywords to search for")
    search.add_argument("--limit", type=int, help="Maximum results, 0 for unlimited")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments without the program name, defaults to ``sys.argv``.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "limit", None) is not None and args.limit < 0:
        parser.error("--limit must not be negative")
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=args.log_level or settings.log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    source = args.source or settings.source
    if source is None:
        print("error: no source given; pass --source or set CHEATSHEET_SOURCE", file=sys.stderr)
        return EXIT_UNAVAILABLE

    library = ReferenceLibrary()
    try:
        library.load(source)
    except MalformedDocument as exc:
        print(f"error: malformed document: {exc}", file=sys.stderr)
        return EXIT_MALFORMED
    except SourceUnavailable as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    renderer = SnippetRenderer(args.output_format or settings.output_format)
    catalog = library.catalog
    try:
        if args.command == "list-sections":
            output = _list_sections(renderer, catalog, args.document)
        elif args.command == "show":
            sections = catalog.show(" ".join(args.title), document=args.document)
            output = "\n\n".join(renderer.render_section(section, document) for document, section in sections)
        else:
            limit = settings.search_limit if args.limit is None else (args.limit or None)
            query = " ".join(args.keywords)
            fetched = list(catalog.search(query, limit=None if limit is None else limit + 1, document=args.document))
            if limit is not None and len(fetched) > limit:
                fetched = fetched[:limit]
                print(f"note: showing the first {limit} results; pass --limit 0 for all", file=sys.stderr)
            output = renderer.render_results(fetched)
            if not fetched:
                logger.info("No results for %r", query)
    except InvalidQuery as exc:
        print(f"{exc}", file=sys.stderr)
        return EXIT_OK

    if output:
        print(output)
    return EXIT_OK


def _list_sections(renderer: SnippetRenderer, catalog: Catalog, document: int | None) -> str:
    """Render section titles, grouped under document titles when several documents are selected.

    Args:
        renderer: Output renderer.
        catalog: Active catalog.
        document: 1-based document number, or None for all documents.

    Returns:
        Rendered titles.
    """
    grouped = catalog.list_sections(document)
    if len(grouped) == 1 or renderer.output_format == "json":
        titles = [title for _, document_titles in grouped for title in document_titles]
        return renderer.render_titles(titles)
    return "\n\n".join(f"{doc.title}\n{renderer.render_titles(titles)}" for doc, titles in grouped)
