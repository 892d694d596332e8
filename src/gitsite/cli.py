"""CLI for the site generator (outline, chapter lookup, search index, block preview)."""

import json
import subprocess
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from gitsite.config import SiteConfig, build_config, resolve_source_directory
from gitsite.core.content.blogs import blog_listing, load_blogs
from gitsite.core.render.blocks import default_registry
from gitsite.core.render.cache import RenderCache
from gitsite.core.scanner.filesystem import list_static_files
from gitsite.core.search.collector import collect_documents
from gitsite.core.search.exporter import export_index, format_size, load_index
from gitsite.core.search.index import build_index
from gitsite.core.tree.builder import load_book
from gitsite.core.tree.navigation import find_chapter, flatten, get_breadcrumbs
from gitsite.errors import IndexFormatError, StructuralError
from gitsite.logging_config import configure_logging
from gitsite.writer import OutputWriter

app = typer.Typer(help="GitSite: build searchable sites from markdown books, blogs and pages.")

INDEX_JS = "static/search-index.js"
INDEX_JSON = "static/search-index.json"

SourceDirOption = Annotated[
    Path | None,
    typer.Option("--source-dir", "-s", help="Site source directory (contains site.yml)"),
]
OutputDirOption = Annotated[
    Path | None,
    typer.Option("--output-dir", "-o", help="Output directory"),
]


def _config(
    source_dir: Path | None, output_dir: Path | None, *, disable_cache: bool = False
) -> SiteConfig:
    src = source_dir or resolve_source_directory()
    if not src.is_dir():
        logger.error("Source directory not found: {}", src)
        raise typer.Exit(1)
    dst = output_dir or src.parent / "dist"
    return build_config(src, dst, disable_cache=disable_cache)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


@app.command()
def tree(
    book: str = typer.Argument(..., help="Book directory name under books/"),
    source_dir: SourceDirOption = None,
) -> None:
    """Print the chapter outline of a book in reading order."""
    config = _config(source_dir, None)
    try:
        loaded = load_book(config.source_dir / "books", book)
    except StructuralError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    typer.echo(f"{loaded.title}" + (f" by {loaded.author}" if loaded.author else ""))
    for entry in flatten(loaded.root):
        node = entry.item
        indent = "  " * (node.level - 1)
        typer.echo(f"{indent}{node.marker} {node.title}  /books/{node.uri}/")


@app.command()
def chapter(
    uri: str = typer.Argument(..., help="Chapter URI, e.g. 'guide/setup/linux'"),
    source_dir: SourceDirOption = None,
) -> None:
    """Show where a chapter sits in its book: breadcrumbs, neighbours and attachments."""
    config = _config(source_dir, None)
    uri = uri.strip("/")
    book_name = uri.split("/", 1)[0]
    books_dir = config.source_dir / "books"
    try:
        loaded = load_book(books_dir, book_name)
    except StructuralError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    node = find_chapter(loaded.root, uri)
    if node is None or node is loaded.root:
        logger.error("No chapter {} in book {}", uri, book_name)
        raise typer.Exit(1)

    trail = [loaded.title, *(c.title for c in get_breadcrumbs(loaded.root, uri))]
    typer.echo(" > ".join(trail))
    typer.echo(f"{node.marker} {node.title}  /books/{node.uri}/")
    entry = next(e for e in flatten(loaded.root) if e.item is node)
    if entry.prev is not None:
        typer.echo(f"prev: {entry.prev.item.title}  /books/{entry.prev.item.uri}/")
    if entry.next is not None:
        typer.echo(f"next: {entry.next.item.title}  /books/{entry.next.item.uri}/")
    for name in list_static_files(books_dir / node.dir):
        typer.echo(f"file: {name}")


@app.command("config")
def show_config(
    source_dir: SourceDirOption = None,
    output_dir: OutputDirOption = None,
) -> None:
    """Print the resolved directories and site settings."""
    config = _config(source_dir, output_dir)
    typer.echo(f"source: {config.source_dir}")
    typer.echo(f"output: {config.output_dir}")
    typer.echo(f"cache:  {config.cache_dir}")
    typer.echo(f"theme:  {config.theme_dir}")
    if not config.theme_dir.is_dir():
        logger.warning("Theme directory not found: {}", config.theme_dir)
    typer.echo(json.dumps(config.settings, indent=2, ensure_ascii=False))


@app.command()
def index(
    source_dir: SourceDirOption = None,
    output_dir: OutputDirOption = None,
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write anything"),
) -> None:
    """Build the search index and blog listings into the output directory."""
    config = _config(source_dir, output_dir)
    try:
        blogs = load_blogs(config.source_dir / "blogs")
        docs = collect_documents(config, blogs)
    except StructuralError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    exported = export_index(build_index(docs))
    js = exported.to_javascript()

    writer = OutputWriter(config.output_dir, dry_run=dry_run)
    writer.write_text(INDEX_JS, js)
    writer.write_text(INDEX_JSON, exported.to_json())
    for tag, posts in blogs.items():
        if posts:
            writer.write_json(f"blogs/{tag}/index.json", blog_listing(posts))
    writer.finalize()
    logger.info("generated search index: {}", format_size(len(js)))


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    output_dir: OutputDirOption = None,
    limit: int = typer.Option(20, "--limit", "-n", help="Max results"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search an exported index."""
    dst = output_dir or resolve_source_directory().parent / "dist"
    index_file = dst / INDEX_JSON
    try:
        loaded = load_index(index_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.error("Search index not found: {}. Run 'index' first.", index_file)
        raise typer.Exit(1) from None
    except IndexFormatError as e:
        logger.error("Search index {} is unusable: {}", index_file, e)
        raise typer.Exit(1) from e

    hits = loaded.search(query, limit=limit)
    if output_json:
        data = {
            "results": [
                {"id": h.id, "uri": h.uri, "title": h.title, "snippet": h.snippet, "score": h.score}
                for h in hits
            ],
            "total": len(hits),
        }
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        typer.echo(f"Found {len(hits)} results:\n")
        for h in hits:
            typer.echo(f"  {h.title}  [{h.uri}]")
            typer.echo(f"    {h.snippet[:80]}")
            typer.echo()


@app.command()
def block(
    info: str = typer.Argument(..., help="Fence info string, e.g. 'mermaid' or 'alert warning'"),
    source_file: Path = typer.Argument(..., help="File with the block's raw content"),
    source_dir: SourceDirOption = None,
    output_dir: OutputDirOption = None,
    no_cache: bool = typer.Option(False, "--no-cache", help="Ignore cached renderings"),
) -> None:
    """Render one fenced block through the block renderers and print the HTML."""
    config = _config(source_dir, output_dir, disable_cache=no_cache)
    cache = RenderCache(config.cache_dir, disabled=config.disable_cache)
    registry = default_registry(cache)
    try:
        html = registry.render_fence(info, source_file.read_text(encoding="utf-8"))
    except subprocess.CalledProcessError as e:
        logger.error("Block renderer command failed: {}", e)
        raise typer.Exit(1) from e
    except OSError as e:
        logger.error("Cannot render block: {}", e)
        raise typer.Exit(1) from e
    typer.echo(html, nl=False)
    logger.debug("render cache: {} hits, {} misses", cache.hits, cache.misses)
