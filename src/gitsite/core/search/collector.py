"""Gather the searchable documents of a site: book chapters, blog posts, pages."""

from loguru import logger

from gitsite.config import SiteConfig
from gitsite.core.content.blogs import load_blogs
from gitsite.core.content.metadata import MarkdownMetadataLoader, markdown_to_text
from gitsite.core.content.pages import list_pages
from gitsite.core.scanner.filesystem import list_subdirs
from gitsite.core.tree.builder import load_book
from gitsite.core.tree.navigation import flatten
from gitsite.errors import EmptyBookError
from gitsite.models.node import BlogPost, Linked, SearchDocument


def collect_documents(
    config: SiteConfig, blogs: dict[str, list[Linked[BlogPost]]] | None = None
) -> list[SearchDocument]:
    """Load every book, blog and page under the source directory.

    Pass `blogs` (from load_blogs) when the caller already loaded them.

    Ids are assigned densely in collection order: books (sorted by name,
    chapters in reading order), then blogs per tag (newest first), then pages.
    """
    source_dir = config.source_dir
    prefix = config.root_path
    loader = MarkdownMetadataLoader()
    docs: list[SearchDocument] = []

    def add(uri: str, title: str, content: str) -> None:
        docs.append(
            SearchDocument(id=len(docs), uri=uri, title=title, content=markdown_to_text(content))
        )

    books_dir = source_dir / "books"
    for book_name in sorted(list_subdirs(books_dir)):
        logger.info("generate search index for book: {}", book_name)
        book = load_book(books_dir, book_name, loader=loader)
        if not book.root.children:
            raise EmptyBookError(book_name)
        for chapter in flatten(book.root):
            node = chapter.item
            add(f"{prefix}/books/{node.uri}/index.html", node.title, node.content)

    if blogs is None:
        blogs = load_blogs(source_dir / "blogs", loader)
    for tag, posts in blogs.items():
        logger.info("generate search index for blog {}: {} posts", tag, len(posts))
        for entry in posts:
            post = entry.item
            add(f"{prefix}/blogs/{post.uri}/index.html", post.title, post.content)

    for page in list_pages(source_dir / "pages", loader):
        logger.debug("generate search index for page: {}", page.name)
        add(f"{prefix}/pages/{page.uri}/index.html", page.title, page.content)

    logger.info("Collected {} searchable documents", len(docs))
    return docs
