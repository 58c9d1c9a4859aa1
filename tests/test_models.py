"""Tests for the reference data models."""

import dataclasses

import pytest

from cheatsheet_reference.models import ReferenceDocument, Section, Snippet, SnippetLanguage


@pytest.mark.parametrize(
    ("tag", "expected"),
    [
        ("bash", SnippetLanguage.SHELL),
        ("Shell", SnippetLanguage.SHELL),
        ("php", SnippetLanguage.CODE),
        ("env", SnippetLanguage.CONFIG),
        ("yaml", SnippetLanguage.CONFIG),
        ("blade", SnippetLanguage.TEMPLATE),
        ("", SnippetLanguage.PLAIN),
        (None, SnippetLanguage.PLAIN),
        ("text", SnippetLanguage.PLAIN),
        ("brainfuck", SnippetLanguage.OTHER),
    ],
)
def test_language_from_tag(tag: str | None, expected: SnippetLanguage) -> None:
    """Test mapping free-form tags onto language families."""
    assert SnippetLanguage.from_tag(tag) is expected


def test_models_are_immutable() -> None:
    """Test that sections and snippets cannot be modified after parsing."""
    snippet = Snippet(tag="bash", language=SnippetLanguage.SHELL, text="ls", position=0)
    section = Section(title="Files", ordinal=0, snippets=(snippet,))

    with pytest.raises(dataclasses.FrozenInstanceError):
        snippet.text = "rm -rf /"  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        section.title = "Other"  # type: ignore[misc]


def test_document_lookups() -> None:
    """Test section lookup and snippet ownership helpers."""
    first = Snippet(tag="bash", language=SnippetLanguage.SHELL, text="ls", position=0)
    second = Snippet(tag="php", language=SnippetLanguage.CODE, text="echo 1;", position=1)
    document = ReferenceDocument(
        title="Sheet",
        source="<string>",
        ordinal=0,
        sections=(
            Section(title="Files", ordinal=0, snippets=(first,)),
            Section(title="PHP", ordinal=1, snippets=(second,)),
        ),
    )

    assert document.snippets == (first, second)
    assert document.section("PHP") is document.sections[1]
    assert document.section("Missing") is None
    assert document.section_of(second).title == "PHP"

    stranger = Snippet(tag="", language=SnippetLanguage.PLAIN, text="x", position=7)
    with pytest.raises(KeyError):
        document.section_of(stranger)
