"""Shared fixtures."""

from pathlib import Path

import pytest

SETTINGS_VARIABLES = (
    "CHEATSHEET_SOURCE",
    "CHEATSHEET_FORMAT",
    "CHEATSHEET_SEARCH_LIMIT",
    "CHEATSHEET_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove settings variables and run from an empty directory.

    Setting before deleting makes monkeypatch restore the original state,
    including values a dotenv file loaded during the test.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        tmp_path: Pytest temporary directory fixture.
    """
    monkeypatch.chdir(tmp_path)
    for name in SETTINGS_VARIABLES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def routing_sheet() -> str:
    """Return a one-section cheat sheet with a single shell snippet.

    Returns:
        Markdown text.
    """
    return """# Laravel

## Routing

List all routes:

```shell
php artisan route:list
```
"""
