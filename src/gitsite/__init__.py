"""Static site tooling: book trees, blogs, pages and a client-side search index."""

from gitsite.config import SiteConfig, build_config
from gitsite.core.search.index import SearchIndex
from gitsite.protocols import BlockRenderer, DirectoryScanner, MetadataLoader
from gitsite.writer import OutputWriter

__all__ = [
    "BlockRenderer",
    "DirectoryScanner",
    "MetadataLoader",
    "OutputWriter",
    "SearchIndex",
    "SiteConfig",
    "build_config",
]
