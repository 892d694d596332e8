"""Protocols for the collaborators of the tree builder and block renderer."""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class DirectoryScanner(Protocol):
    """Lists the immediate entries of a directory, in no particular order."""

    def list_subdirs(self, path: Path) -> list[str]:
        """Return names of immediate subdirectories ([] if path is missing)."""
        ...

    def list_files(self, path: Path, filter_fn: Callable[[str], bool]) -> list[str]:
        """Return names of immediate regular files accepted by filter_fn."""
        ...


@runtime_checkable
class MetadataLoader(Protocol):
    """Reads the title and markdown body of a content directory."""

    def load(self, directory: Path) -> tuple[str, str]:
        """Return (title, content) from the directory's designated file."""
        ...


@runtime_checkable
class BlockRenderer(Protocol):
    """Renders one fenced code block of a given type."""

    def render(self, args: list[str], content: str) -> str | None:
        """Return HTML for the block, or None to fall through to the default."""
        ...
