"""Directory listing used by the tree builder and the content loaders."""

from collections.abc import Callable
from pathlib import Path


def list_subdirs(path: Path, filter_fn: Callable[[str], bool] | None = None) -> list[str]:
    """Return names of immediate subdirectories of path.

    A missing directory is not an error: books/, blogs/ and pages/ are all optional.
    The order is whatever the filesystem returns; callers sort.
    """
    if not path.exists():
        return []
    names = [entry.name for entry in path.iterdir() if entry.is_dir()]
    if filter_fn is not None:
        names = [name for name in names if filter_fn(name)]
    return names


def list_files(path: Path, filter_fn: Callable[[str], bool]) -> list[str]:
    """Return names of immediate regular files of path accepted by filter_fn."""
    return [entry.name for entry in path.iterdir() if entry.is_file() and filter_fn(entry.name)]


# Files in a content directory that are rendered rather than copied.
_GENERATED_FILES = {"README.md", "index.html"}


def is_static_file(name: str) -> bool:
    """Attachments (images, downloads) are copied next to the generated page."""
    return not name.startswith(".") and name not in _GENERATED_FILES


def list_static_files(path: Path) -> list[str]:
    return sorted(list_files(path, is_static_file))


class FileSystemScanner:
    """DirectoryScanner backed by the local filesystem."""

    def list_subdirs(self, path: Path) -> list[str]:
        return list_subdirs(path)

    def list_files(self, path: Path, filter_fn: Callable[[str], bool]) -> list[str]:
        return list_files(path, filter_fn)
