"""Shared test fixtures."""

from pathlib import Path

import pytest

from gitsite.config import SiteConfig, build_config

SITE_SOURCE = {
    "site.yml": "site:\n  title: Test Site\n  description: A site for tests\n",
    "books/guide/book.yml": "title: User Guide\nauthor: Alice\ndescription: How to use it\n",
    "books/guide/10-intro/README.md": "# Introduction\n\nWelcome to the **guide**.\n",
    "books/guide/2-setup/README.md": "# Setup\n\nInstall python first.\n",
    "books/guide/2-setup/1-linux/README.md": "# Linux\n\nUse the package manager.\n",
    "books/guide/notes/README.md": "# Notes\n\nAssorted notes.\n",
    "blogs/tech/2024-01-15-hello/README.md": "# Hello World\n\nFirst post about python.\n",
    "blogs/tech/2024-03-01/README.md": "# Spring Update\n\nWhat changed this spring.\n",
    "pages/about/README.md": "\n# About\n\nAbout this site.\n",
}


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Create files (and their parent directories) under root."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


@pytest.fixture
def site_source(tmp_path: Path) -> Path:
    """Return a site source directory with one book, one blog tag and one page."""
    source = tmp_path / "source"
    write_tree(source, SITE_SOURCE)
    return source


@pytest.fixture
def site_config(site_source: Path) -> SiteConfig:
    return build_config(site_source, site_source.parent / "dist")
