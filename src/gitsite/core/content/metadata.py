"""Read titles and plain text out of markdown source files."""

import html
import re
from pathlib import Path

import markdown

from gitsite.errors import MissingMetadataError, MissingTitleError

SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
# Inline tags are removed without a gap: "un**believ**able" -> "unbelievable".
# Any other tag separates words.
INLINE_TAG_RE = re.compile(
    r"</?(?:a|abbr|b|code|del|em|i|kbd|mark|s|small|span|strong|sub|sup|u)\b[^>]*>",
    re.IGNORECASE,
)
TAG_RE = re.compile(r"<[^>]+>")
WS_RE = re.compile(r"\s+")


def markdown_title_content(md_file: Path) -> tuple[str, str]:
    """Return (title, content) of a markdown file.

    The first non-blank line must be a "# title" heading; content is
    everything after that line.
    """
    try:
        text = md_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MissingMetadataError(str(md_file)) from None

    lines = text.split("\n")
    for lnum, line in enumerate(lines):
        s = line.strip()
        if not s:
            continue
        if s.startswith("# ") and s[2:].strip():
            return s[2:].strip(), "\n".join(lines[lnum + 1 :])
        break
    raise MissingTitleError(str(md_file))


class MarkdownMetadataLoader:
    """MetadataLoader reading a designated markdown file in each directory."""

    def __init__(self, filename: str = "README.md") -> None:
        self.filename = filename

    def load(self, directory: Path) -> tuple[str, str]:
        return markdown_title_content(directory / self.filename)


def markdown_to_text(source: str) -> str:
    """Convert markdown to plain text for indexing."""
    rendered = markdown.markdown(source, extensions=["fenced_code", "tables"])
    no_script = SCRIPT_RE.sub(" ", rendered)
    no_style = STYLE_RE.sub(" ", no_script)
    no_tags = TAG_RE.sub(" ", INLINE_TAG_RE.sub("", no_style))
    return WS_RE.sub(" ", html.unescape(no_tags)).strip()
