"""Tests for markdown title extraction and plain-text conversion."""

from pathlib import Path

import pytest

from gitsite.core.content.metadata import (
    MarkdownMetadataLoader,
    markdown_title_content,
    markdown_to_text,
)
from gitsite.errors import MissingMetadataError, MissingTitleError
from gitsite.protocols import MetadataLoader


def _md(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "README.md"
    path.write_text(text, encoding="utf-8")
    return path


def test_title_and_content(tmp_path: Path) -> None:
    title, content = markdown_title_content(_md(tmp_path, "# Hello\n\nBody line\n"))

    assert title == "Hello"
    assert content == "\nBody line\n"


def test_leading_blank_lines_are_skipped(tmp_path: Path) -> None:
    title, content = markdown_title_content(_md(tmp_path, "\n  \n#   Spaced Title  \nrest"))

    assert title == "Spaced Title"
    assert content == "rest"


@pytest.mark.parametrize("text", ["", "\n\n", "Intro\n# Title", "## Sub\n", "#\n", "#Title\n"])
def test_missing_title(tmp_path: Path, text: str) -> None:
    with pytest.raises(MissingTitleError, match="must have a title"):
        markdown_title_content(_md(tmp_path, text))


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MissingMetadataError, match="not found"):
        markdown_title_content(tmp_path / "README.md")


def test_loader_reads_designated_file(tmp_path: Path) -> None:
    (tmp_path / "INDEX.md").write_text("# From index\n", encoding="utf-8")
    loader = MarkdownMetadataLoader("INDEX.md")

    assert isinstance(loader, MetadataLoader)
    assert loader.load(tmp_path) == ("From index", "")


def test_markdown_to_text_strips_markup() -> None:
    text = markdown_to_text(
        "Some **bold** and `code` with a [link](http://x.y).\n\n"
        "```\nfenced < block\n```\n\n"
        "| a | b |\n|---|---|\n| 1 | 2 |\n\n"
        "<script>alert(1)</script>\n"
    )

    assert text == "Some bold and code with a link. fenced < block a b 1 2"


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("un**believ**able", "unbelievable"),
        ("H~2~O and x<sup>2</sup>", "H~2~O and x2"),
        ("call `f`(x) on [it](http://x.y)s", "call f(x) on its"),
        ("# Title\n\nBody", "Title Body"),
        ("a\n\n* one\n* two", "a one two"),
    ],
)
def test_markdown_to_text_inline_and_block_tags(source: str, expected: str) -> None:
    assert markdown_to_text(source) == expected
