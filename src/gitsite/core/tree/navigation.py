"""Tree navigation: reading order, lookup by URI, breadcrumbs."""

from collections.abc import Sequence
from typing import TypeVar

from gitsite.models.node import ContentNode, FlatChapter, Linked

T = TypeVar("T")


def link_entries(items: Sequence[T]) -> list[Linked[T]]:
    """Wrap items in Linked entries with prev/next pointing at their neighbours."""
    entries = [Linked(item=item, index=i) for i, item in enumerate(items)]
    last = len(entries) - 1
    for i, entry in enumerate(entries):
        entry.prev = entries[i - 1] if i > 0 else None
        entry.next = entries[i + 1] if i < last else None
    return entries


def _preorder(node: ContentNode, out: list[ContentNode]) -> None:
    out.append(node)
    for child in node.children:
        _preorder(child, out)


def flatten(root: ContentNode) -> list[FlatChapter]:
    """Return the chapters of a tree in reading order (depth-first, pre-order).

    The root itself is not part of the sequence.
    """
    nodes: list[ContentNode] = []
    for child in root.children:
        _preorder(child, nodes)
    return link_entries(nodes)


def find_chapter(node: ContentNode, uri: str) -> ContentNode | None:
    """Find the node with the given URI by descending along URI prefixes."""
    if node.uri == uri:
        return node
    for child in node.children:
        if child.uri == uri:
            return child
        if uri.startswith(child.uri + "/"):
            return find_chapter(child, uri)
    return None


def get_breadcrumbs(root: ContentNode, uri: str) -> tuple[ContentNode, ...]:
    """Get ancestor chapters of the node at uri.

    Returns breadcrumbs in order from the top-level chapter to the immediate
    parent (excludes the root and the node itself). Unknown URIs yield ().
    """
    trail: list[ContentNode] = []
    node = root
    while node.uri != uri:
        for child in node.children:
            if child.uri == uri or uri.startswith(child.uri + "/"):
                node = child
                break
        else:
            return ()
        trail.append(node)
    # Last element is the node itself.
    return tuple(trail[:-1])
