"""Environment-driven settings."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from cheatsheet_reference.presentation import OUTPUT_FORMATS

DEFAULT_SEARCH_LIMIT = 10
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the reference tool."""

    source: Path | None = None
    output_format: str = "text"
    search_limit: int | None = DEFAULT_SEARCH_LIMIT
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        """Build settings from ``CHEATSHEET_*`` environment variables.

        A ``.env`` file, searched upward from the working directory, is
        loaded first when present; variables already set in the environment
        take precedence.

        Args:
            env_file: Explicit dotenv file, defaults to ``.env`` lookup.

        Returns:
            Settings instance.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True))

        source = os.getenv("CHEATSHEET_SOURCE")
        output_format = os.getenv("CHEATSHEET_FORMAT", "text").strip().lower()
        if output_format not in OUTPUT_FORMATS:
            msg = f"CHEATSHEET_FORMAT must be one of {', '.join(OUTPUT_FORMATS)}, got {output_format!r}"
            raise ValueError(msg)

        log_level = os.getenv("CHEATSHEET_LOG_LEVEL", "WARNING").strip().upper()
        if log_level not in LOG_LEVELS:
            msg = f"CHEATSHEET_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            raise ValueError(msg)

        return cls(
            source=Path(source) if source else None,
            output_format=output_format,
            search_limit=parse_limit(os.getenv("CHEATSHEET_SEARCH_LIMIT", str(DEFAULT_SEARCH_LIMIT))),
            log_level=log_level,
        )


def parse_limit(value: str) -> int | None:
    """Parse a result limit where ``0`` means unlimited.

    Raises:
        ValueError: If the value is not a non-negative integer.
    """
    try:
        limit = int(value)
    except ValueError:
        msg = f"CHEATSHEET_SEARCH_LIMIT must be an integer, got {value!r}"
        raise ValueError(msg) from None
    if limit < 0:
        msg = f"CHEATSHEET_SEARCH_LIMIT must not be negative, got {limit}"
        raise ValueError(msg)
    return limit or None
