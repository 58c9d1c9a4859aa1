"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest

from cheatsheet_reference.cli import EXIT_MALFORMED, EXIT_OK, EXIT_UNAVAILABLE, main


@pytest.fixture
def sheet(tmp_path: Path, routing_sheet: str) -> Path:
    """Write the routing sheet to a file.

    Args:
        tmp_path: Pytest temporary directory fixture.
        routing_sheet: Markdown text fixture.

    Returns:
        Path to the Markdown file.
    """
    path = tmp_path / "laravel.md"
    path.write_text(routing_sheet + "\n## Route Cache\n\n```shell\nphp artisan route:cache\n```\n")
    return path


def test_list_sections(sheet: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test listing section titles."""
    assert main(["--source", str(sheet), "list-sections"]) == EXIT_OK

    assert capsys.readouterr().out == "Routing\nRoute Cache\n"


def test_list_sections_per_document(tmp_path: Path, routing_sheet: str, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that concatenated copies are listed per document."""
    path = tmp_path / "twice.md"
    path.write_text(routing_sheet + routing_sheet)

    assert main(["--source", str(path), "list-sections"]) == EXIT_OK
    assert capsys.readouterr().out == "Laravel\nRouting\n\nLaravel\nRouting\n"

    assert main(["--source", str(path), "--document", "2", "list-sections"]) == EXIT_OK
    assert capsys.readouterr().out == "Routing\n"


def test_show_multi_word_title(sheet: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test showing a section whose title has several words."""
    assert main(["--source", str(sheet), "--format", "markdown", "show", "Route", "Cache"]) == EXIT_OK

    assert capsys.readouterr().out == "## Route Cache\n\n```shell\nphp artisan route:cache\n```\n"


def test_show_missing_section(sheet: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that a missing section is reported without failing."""
    assert main(["--source", str(sheet), "show", "Validation"]) == EXIT_OK

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Section not found: 'Validation'" in captured.err


def test_search(sheet: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that search prints ranked snippets."""
    assert main(["--source", str(sheet), "search", "route", "cache"]) == EXIT_OK

    out = capsys.readouterr().out
    assert out.index("php artisan route:cache") < out.index("php artisan route:list")


def test_search_json_with_limit(sheet: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test JSON output limited to one result."""
    assert main(["--source", str(sheet), "--format", "json", "search", "--limit", "1", "route"]) == EXIT_OK

    entries = json.loads(capsys.readouterr().out)
    assert len(entries) == 1
    assert entries[0]["section"] == "Routing"
    assert entries[0]["tag"] == "shell"


def test_search_no_results(sheet: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that a search without matches succeeds with no output."""
    assert main(["--source", str(sheet), "search", "eloquent"]) == EXIT_OK

    assert capsys.readouterr().out == ""


def test_source_from_environment(sheet: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that CHEATSHEET_SOURCE is used when --source is omitted."""
    monkeypatch.setenv("CHEATSHEET_SOURCE", str(sheet))
    monkeypatch.setenv("CHEATSHEET_FORMAT", "markdown")

    assert main(["list-sections"]) == EXIT_OK
    assert capsys.readouterr().out == "- Routing\n- Route Cache\n"


def test_malformed_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that duplicate section titles fail ingestion."""
    path = tmp_path / "broken.md"
    path.write_text("# Sheet\n\n## Routing\n\n## Routing\n")

    assert main(["--source", str(path), "list-sections"]) == EXIT_MALFORMED
    assert "Duplicate section title" in capsys.readouterr().err


def test_missing_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that a nonexistent source is an I/O failure."""
    assert main(["--source", str(tmp_path / "missing.md"), "list-sections"]) == EXIT_UNAVAILABLE
    assert "does not exist" in capsys.readouterr().err


def test_no_source(capsys: pytest.CaptureFixture[str]) -> None:
    """Test running without any configured source."""
    assert main(["list-sections"]) == EXIT_UNAVAILABLE
    assert "no source given" in capsys.readouterr().err


def test_invalid_document_number(sheet: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test selecting a document that does not exist."""
    assert main(["--source", str(sheet), "--document", "5", "list-sections"]) == EXIT_OK
    assert "Document 5 does not exist" in capsys.readouterr().err


def test_negative_limit(sheet: Path) -> None:
    """Test that argparse rejects a negative limit."""
    with pytest.raises(SystemExit) as excinfo:
        main(["--source", str(sheet), "search", "--limit", "-1", "route"])

    assert excinfo.value.code == 2


def test_source_from_dotenv_in_working_directory(
    sheet: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test that the CLI reads its source from a .env file in the working directory."""
    (tmp_path / ".env").write_text(f"CHEATSHEET_SOURCE={sheet}\n")
    monkeypatch.chdir(tmp_path)

    assert main(["list-sections"]) == EXIT_OK
    assert capsys.readouterr().out == "Routing\nRoute Cache\n"


def test_search_reports_truncation(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that cutting results at the default limit is announced on stderr."""
    blocks = "".join(f"## Command {number}\n\n```shell\nphp artisan make:model M{number}\n```\n\n" for number in range(15))
    path = tmp_path / "many.md"
    path.write_text("# Artisan\n\n" + blocks)

    assert main(["--source", str(path), "--format", "json", "search", "artisan"]) == EXIT_OK
    captured = capsys.readouterr()
    assert len(json.loads(captured.out)) == 10
    assert "showing the first 10 results" in captured.err

    assert main(["--source", str(path), "--format", "json", "search", "--limit", "0", "artisan"]) == EXIT_OK
    captured = capsys.readouterr()
    assert len(json.loads(captured.out)) == 15
    assert captured.err == ""
