"""Dispatch fenced code blocks to block renderers by their type.

A fence like ``` mermaid ``` or ``` alert warning ``` is handed to the
renderer registered for its first info word; unknown types, and renderers
that return None, fall through to a plain escaped code block.
"""

import html
import re
import subprocess

import markdown
from loguru import logger

from gitsite.core.render.cache import RenderCache, block_key
from gitsite.core.render.plugins import (
    check_enum_arg,
    check_int_arg,
    delete_all_by_range,
    get_by_range,
    parse_args,
)
from gitsite.protocols import BlockRenderer

MERMAID_COMMAND = ["npx", "-p", "@mermaid-js/mermaid-cli", "mmdc", "-b", "transparent"]

# Hard-coded colours emitted by mermaid; themes style diagrams through CSS instead.
_MERMAID_COLOURS = [
    ('fill="#', '"'),
    ('stroke="#', '"'),
    ('fill="hsl(', ')"'),
    ('stroke="hsl(', ')"'),
    ("fill: rgb(", ");"),
    ("stroke: rgb(", ");"),
]


def default_fence(lang: str, content: str) -> str:
    lang = lang or "text"
    return (
        f'<pre class="hljs"><code class="language-{html.escape(lang)}">'
        f"{html.escape(content)}</code></pre>\n"
    )


def render_inline(text: str) -> str:
    """Render markdown without the wrapping paragraph."""
    rendered = markdown.markdown(text).strip()
    if rendered.startswith("<p>") and rendered.endswith("</p>") and rendered.count("<p>") == 1:
        rendered = rendered[3:-4]
    return rendered


class BlockRegistry:
    """Maps a block type (the fence's first info word) to its renderer."""

    def __init__(self) -> None:
        self._renderers: dict[str, BlockRenderer] = {}

    def register(self, block_type: str, renderer: BlockRenderer) -> None:
        key = block_type.lower()
        if key in self._renderers:
            msg = f"Block renderer for {block_type!r} already registered"
            raise ValueError(msg)
        logger.debug("register block renderer: {}", key)
        self._renderers[key] = renderer

    def __contains__(self, block_type: str) -> bool:
        return block_type.lower() in self._renderers

    def render_fence(self, info: str, content: str) -> str:
        """Render a fenced block given its info string and raw content."""
        words = info.strip().lower().split()
        if not words:
            return default_fence("", content)
        block_type, args = words[0], words[1:]
        renderer = self._renderers.get(block_type)
        if renderer is not None:
            logger.debug("use block renderer {}", block_type)
            result = renderer.render(args, content)
            if result is not None:
                return result
        return default_fence(block_type, content)


ALERT_KINDS = ["info", "success", "warning", "danger", "primary", "secondary", "light", "dark"]


class AlertRenderer:
    """``` alert warning ``` -> <div class="alert alert-warning"><p>...</p></div>"""

    def render(self, args: list[str], content: str) -> str | None:
        kind = check_enum_arg(args[0] if args else None, ALERT_KINDS)
        return f'<div class="alert alert-{kind}"><p>{render_inline(content)}</p></div>\n'


VIDEO_SOURCES: dict[str, tuple[list[re.Pattern[str]], str]] = {
    "youtube": (
        [
            re.compile(r"https://www\.youtube\.com/watch\?v=(\w+).*"),
            re.compile(r"https://www\.youtube\.com/embed/(\w+).*"),
        ],
        "https://www.youtube.com/embed/{key}",
    ),
    "bilibili": (
        [re.compile(r"https://www\.bilibili\.com/video/(BV\w+).*")],
        "https://player.bilibili.com/player.html?bvid={key}&autoplay=0",
    ),
}

_ALIGN_STYLES = {
    "left": "margin-left:0;margin-right:auto;",
    "center": "margin-left:auto;margin-right:auto;",
    "right": "margin-left:auto;margin-right:0;",
}

DEFAULT_RATIO = (4, 3)


def parse_ratio(value: object) -> tuple[int, int]:
    """'16:9' -> (16, 9); anything unparseable or outside 1..100 gives DEFAULT_RATIO."""
    parts = str(value).split(":") if isinstance(value, str) else []
    if len(parts) != 2:
        return DEFAULT_RATIO
    w = check_int_arg(parts[0], 0, lambda n: 0 < n <= 100)
    h = check_int_arg(parts[1], 0, lambda n: 0 < n <= 100)
    if not (w and h):
        logger.warning("parse ratio failed: {}", value)
        return DEFAULT_RATIO
    return w, h


def match_video(url: str) -> tuple[str, str] | None:
    """Return (source, embed url) for a supported video page URL."""
    for source, (patterns, embed) in VIDEO_SOURCES.items():
        for pattern in patterns:
            m = pattern.fullmatch(url)
            if m:
                return source, embed.format(key=m.group(1))
    return None


class VideoRenderer:
    """``` video ratio=16:9 align=center max-width=640 ``` with a YouTube or Bilibili URL."""

    def render(self, args: list[str], content: str) -> str | None:
        kv = parse_args(args)
        align = check_enum_arg(kv.get("align"), ["left", "center", "right"])
        max_width = check_int_arg(kv.get("max-width"), 0, lambda n: 10 <= n <= 10000)
        w, h = parse_ratio(kv.get("ratio"))

        found = match_video(content.strip())
        if found is None:
            return f"<p>ERROR parse video url: {html.escape(content)}</p>"
        source, src = found
        src = html.escape(src)
        style = _ALIGN_STYLES[align] + (f"max-width:{max_width}px;" if max_width else "")
        return (
            f'<div class="gsc-video-wrapper" style="{style}">'
            f'<div class="gsc-video-container gsc-video-container-{source}" '
            f'style="padding-bottom: {100 * h / w:.4f}%">'
            f'<iframe class="gsc-video gsc-video-{source}" src="{src}" allowfullscreen></iframe>'
            "</div></div>\n"
        )


class MermaidRenderer:
    """Render mermaid diagrams to inline SVG with the mermaid CLI.

    Generating a diagram takes seconds, so output is kept in the render
    cache keyed by the diagram source.
    """

    def __init__(self, cache: RenderCache, command: list[str] | None = None) -> None:
        self.cache = cache
        self.command = command or MERMAID_COMMAND

    def render(self, args: list[str], content: str) -> str | None:
        key = block_key(content)
        svg = self.cache.get_or_render(key, lambda: self._generate(key, content), suffix=".svg")
        return svg + "\n"

    def _generate(self, key: str, content: str) -> str:
        logger.info("generate mermaid svg {}", key[:10])
        cache_dir = self.cache.cache_dir
        cache_dir.mkdir(parents=True, exist_ok=True)
        source = cache_dir / f"{key}.mmd"
        original = cache_dir / f"{key}-ori.svg"
        source.write_text(content, encoding="utf-8")
        cmd = [*self.command, "-i", str(source), "-o", str(original)]
        logger.debug("exec: {}", " ".join(cmd))
        subprocess.run(cmd, check=True, capture_output=True)
        return clean_mermaid_svg(original.read_text(encoding="utf-8"), key)


def _diagram_type(svg: str) -> str:
    dtype = get_by_range(svg, 'aria-roledescription="', '"')
    return dtype.split("-", 1)[0].lower()


def clean_mermaid_svg(svg: str, key: str) -> str:
    """Make mermaid CLI output embeddable: no <style>, no colours, unique id."""
    dtype = _diagram_type(svg)
    svg = delete_all_by_range(svg, "<style>", "</style>")
    svg = svg.replace('id="my-svg"', f'id="my-svg" class="mermaid mermaid-{dtype}"', 1)
    svg = svg.replace("my-svg", "SVG" + key[:10])
    for start, end in _MERMAID_COLOURS:
        svg = delete_all_by_range(svg, start, end)
    return svg


def default_registry(cache: RenderCache) -> BlockRegistry:
    """Registry with the built-in block renderers."""
    registry = BlockRegistry()
    registry.register("alert", AlertRenderer())
    registry.register("mermaid", MermaidRenderer(cache))
    registry.register("video", VideoRenderer())
    return registry
