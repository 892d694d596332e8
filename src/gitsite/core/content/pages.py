"""Standalone pages under pages/<name>/."""

from pathlib import Path

from gitsite.core.content.metadata import MarkdownMetadataLoader
from gitsite.core.scanner.filesystem import list_subdirs
from gitsite.models.node import Page
from gitsite.protocols import MetadataLoader


def list_pages(pages_dir: Path, loader: MetadataLoader | None = None) -> list[Page]:
    """Load every page folder, sorted by name."""
    loader = loader or MarkdownMetadataLoader()
    pages: list[Page] = []
    for name in sorted(list_subdirs(pages_dir)):
        title, content = loader.load(pages_dir / name)
        pages.append(
            Page(name=name, uri=name, title=title, content=content, file=f"/pages/{name}/README.md")
        )
    return pages
