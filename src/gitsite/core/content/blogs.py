"""Blog posts: dated folders under blogs/<tag>/, newest first."""

import re
from datetime import date
from pathlib import Path
from typing import Any

from loguru import logger

from gitsite.core.content.metadata import MarkdownMetadataLoader
from gitsite.core.scanner.filesystem import list_subdirs
from gitsite.core.tree.navigation import link_entries
from gitsite.errors import InvalidBlogNameError
from gitsite.models.node import BlogPost, Linked
from gitsite.protocols import MetadataLoader

_BLOG_NAME = re.compile(r"^(\d{4}-\d{2}-\d{2})([-._].+)?$")


def is_valid_date(ds: str) -> bool:
    """Check that an ISO 'yyyy-MM-dd' string names a real calendar day."""
    try:
        date.fromisoformat(ds)
    except ValueError:
        return False
    return True


def generate_blog_index(
    blogs_dir: Path,
    tag: str,
    loader: MetadataLoader | None = None,
) -> list[Linked[BlogPost]]:
    """Load all posts of a tag, newest first, linked prev/next.

    Raises InvalidBlogNameError for folders not named 'yyyy-MM-dd[-slug]'.
    """
    loader = loader or MarkdownMetadataLoader()
    posts: list[BlogPost] = []
    for name in sorted(list_subdirs(blogs_dir / tag)):
        m = _BLOG_NAME.match(name)
        if m is None or not is_valid_date(m.group(1)):
            raise InvalidBlogNameError(name)
        title, content = loader.load(blogs_dir / tag / name)
        posts.append(
            BlogPost(
                name=name,
                uri=f"{tag}/{name}",
                title=title,
                content=content,
                date=m.group(1),
                file=f"/blogs/{tag}/{name}/README.md",
            )
        )
    posts.reverse()
    logger.debug("blogs index of {}: {} posts", tag, len(posts))
    return link_entries(posts)


def load_blogs(
    blogs_dir: Path, loader: MetadataLoader | None = None
) -> dict[str, list[Linked[BlogPost]]]:
    """Load every tag under blogs_dir, keyed by tag in sorted order."""
    loader = loader or MarkdownMetadataLoader()
    return {
        tag: generate_blog_index(blogs_dir, tag, loader) for tag in sorted(list_subdirs(blogs_dir))
    }


def blog_listing(posts: list[Linked[BlogPost]]) -> list[dict[str, Any]]:
    """Return the JSON-ready post list written as blogs/<tag>/index.json."""
    return [
        {
            "date": entry.item.date,
            "uri": f"/blogs/{entry.item.uri}/index.html",
            "title": entry.item.title,
        }
        for entry in posts
    ]
