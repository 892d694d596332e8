"""Build the ordered chapter tree of a book from its directory layout."""

from collections import Counter
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath

import yaml
from loguru import logger

from gitsite.core.content.metadata import MarkdownMetadataLoader
from gitsite.core.scanner.filesystem import FileSystemScanner
from gitsite.core.tree.ordering import sort_key
from gitsite.errors import DuplicateChapterError
from gitsite.models.node import Book, ContentNode
from gitsite.protocols import DirectoryScanner, MetadataLoader


@dataclass(frozen=True)
class _ParentContext:
    """What a child needs to know about its parent while being built."""

    level: int
    marker: str
    uri: str


def _child_marker(parent_marker: str, index: int) -> str:
    return f"{parent_marker}.{index + 1}" if parent_marker else str(index + 1)


def _build_children(
    base_dir: Path,
    rel_dir: PurePosixPath,
    ctx: _ParentContext,
    scanner: DirectoryScanner,
    loader: MetadataLoader,
) -> tuple[ContentNode, ...]:
    names = scanner.list_subdirs(base_dir / rel_dir)
    keyed = sorted(sort_key(name) for name in names)

    children: list[ContentNode] = []
    for index, (order, slug, name) in enumerate(keyed):
        children.append(
            _build_node(
                base_dir,
                rel_dir / name,
                ctx,
                index=index,
                order=order,
                slug=slug,
                scanner=scanner,
                loader=loader,
            )
        )

    # Join point: all siblings must exist before their addresses can be compared.
    counts = Counter(child.uri for child in children)
    for child in children:
        if counts[child.uri] > 1:
            raise DuplicateChapterError(child.uri, str(rel_dir))
    return tuple(children)


def _build_node(
    base_dir: Path,
    rel_dir: PurePosixPath,
    parent: _ParentContext,
    *,
    index: int,
    order: int,
    slug: str,
    scanner: DirectoryScanner,
    loader: MetadataLoader,
) -> ContentNode:
    logger.debug("scan dir: {}, order: {}, slug: {}", rel_dir, order, slug)
    title, content = loader.load(base_dir / rel_dir)
    ctx = _ParentContext(
        level=parent.level + 1,
        marker=_child_marker(parent.marker, index),
        uri=f"{parent.uri}/{slug}",
    )
    return ContentNode(
        level=ctx.level,
        marker=ctx.marker,
        dir=str(rel_dir),
        order=order,
        title=title,
        content=content,
        uri=ctx.uri,
        children=_build_children(base_dir, rel_dir, ctx, scanner, loader),
        file=f"/{base_dir.name}/{rel_dir}/README.md",
    )


def build_tree(
    root_id: str,
    base_dir: Path,
    *,
    scanner: DirectoryScanner | None = None,
    loader: MetadataLoader | None = None,
) -> ContentNode:
    """Build the chapter tree rooted at base_dir/root_id.

    Children are ordered by numeric prefix, then slug, then raw directory
    name. Each chapter's URI joins its ancestors' slugs, starting with
    root_id. Raises DuplicateChapterError when two siblings share a URI.

    Args:
        root_id: Name of the root directory; also the URI of the root.
        base_dir: Directory containing the root directory.
        scanner: Directory lister (defaults to the local filesystem).
        loader: Title/content reader for chapter directories.
    """
    scanner = scanner or FileSystemScanner()
    loader = loader or MarkdownMetadataLoader()
    ctx = _ParentContext(level=0, marker="", uri=root_id)
    rel_dir = PurePosixPath(root_id)
    return ContentNode(
        level=0,
        marker="",
        dir=root_id,
        order=0,
        title="",
        content="",
        uri=root_id,
        children=_build_children(base_dir, rel_dir, ctx, scanner, loader),
    )


def load_book(
    books_dir: Path,
    name: str,
    *,
    scanner: DirectoryScanner | None = None,
    loader: MetadataLoader | None = None,
) -> Book:
    """Build a book's chapter tree and attach title/author/description from book.yml."""
    info: dict = {}
    book_yml = books_dir / name / "book.yml"
    if book_yml.is_file():
        info = yaml.safe_load(book_yml.read_text(encoding="utf-8")) or {}

    root = build_tree(name, books_dir, scanner=scanner, loader=loader)
    title = str(info.get("title") or name)
    root = replace(root, title=title)
    logger.debug("{} book index: {} top-level chapters", name, len(root.children))
    return Book(
        name=name,
        title=title,
        author=str(info.get("author") or ""),
        description=str(info.get("description") or ""),
        root=root,
    )
