"""Domain models for the site generator."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ContentNode:
    """One chapter directory of a book, or the synthetic book root.

    `order` is only a sort key and is never displayed; `marker` is the
    dotted outline number ("2.1.3"), empty at the root.
    """

    level: int
    marker: str
    dir: str
    order: int
    title: str
    content: str
    uri: str
    children: tuple["ContentNode", ...] = ()
    # Source markdown of the chapter, relative to the site source. None at the root.
    file: str | None = None


@dataclass(eq=False)
class Linked(Generic[T]):
    """An entry of a reading-order sequence with links to its neighbours."""

    item: T
    index: int
    prev: "Linked[T] | None" = field(default=None, repr=False)
    next: "Linked[T] | None" = field(default=None, repr=False)

    def __eq__(self, other: object) -> bool:
        # Position and item only; prev/next are never compared.
        if not isinstance(other, Linked):
            return NotImplemented
        return (self.item, self.index) == (other.item, other.index)

    __hash__ = None  # type: ignore[assignment]


FlatChapter = Linked[ContentNode]


@dataclass(frozen=True)
class Book:
    """A book: metadata from book.yml plus its chapter tree."""

    name: str
    title: str
    author: str
    description: str
    root: ContentNode


@dataclass(frozen=True)
class BlogPost:
    """A dated blog post under blogs/<tag>/<name>."""

    name: str
    uri: str
    title: str
    content: str
    date: str
    file: str


@dataclass(frozen=True)
class Page:
    """A standalone page under pages/<name>."""

    name: str
    uri: str
    title: str
    content: str
    file: str


@dataclass(frozen=True)
class SearchDocument:
    """One indexable unit with markdown already stripped from `content`."""

    id: int
    uri: str
    title: str
    content: str
    summary: str | None = None


@dataclass(frozen=True)
class DocumentEntry:
    """Side-table row mapping an index id back to something displayable."""

    uri: str
    title: str
    snippet: str


@dataclass(frozen=True)
class SearchHit:
    """A search result."""

    id: int
    uri: str
    title: str
    snippet: str
    score: int = 0
