"""Errors raised while ingesting and querying reference documents."""


class CheatSheetError(Exception):
    """Base class for all cheat-sheet reference errors."""


class MalformedDocument(CheatSheetError):
    """The source text does not have a valid section/snippet structure."""

    def __init__(self, message: str, line: int | None = None, section: str | None = None) -> None:
        """Initialise with the offending location.

        Args:
            message: Description of the structural problem.
            line: 1-based source line where the problem was detected.
            section: Title of the section being parsed, if any.
        """
        self.line = line
        self.section = section
        location = []
        if line is not None:
            location.append(f"line {line}")
        if section is not None:
            location.append(f"section {section!r}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


class SourceUnavailable(CheatSheetError):
    """The source could not be read."""

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialise with the unreadable path.

        Args:
            message: Description of the read failure.
            path: Path that could not be read, if known.
        """
        self.path = path
        super().__init__(message)


class InvalidQuery(CheatSheetError):
    """A query that cannot be answered as given."""


class SectionNotFound(InvalidQuery):
    """No section has the requested title."""

    def __init__(self, title: str) -> None:
        """Initialise with the missing title.

        Args:
            title: Requested section title.
        """
        self.title = title
        super().__init__(f"Section not found: {title!r}")
