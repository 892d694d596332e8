"""Content-addressed cache for the output of slow block renderers."""

import hashlib
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from loguru import logger


def block_key(content: str, args: str = "") -> str:
    """Hash a block's raw text (and argument string, if any) into a cache key.

    Identical source yields the identical key wherever the block appears.
    """
    data = content if not args else f"{args}\n{content}"
    return hashlib.sha1(data.encode("utf-8")).hexdigest()


class RenderCache:
    """Cache rendered blocks on disk as <cache_dir>/<key><suffix>.

    Entries never expire. With disabled=True every call renders again
    (and refreshes the stored entry).
    """

    def __init__(self, cache_dir: str | Path, *, disabled: bool = False) -> None:
        self.cache_dir = Path(cache_dir)
        self.disabled = disabled
        self.hits = 0
        self.misses = 0

    def path_for(self, key: str, suffix: str = ".html") -> Path:
        if not key or "/" in key or key.startswith("."):
            msg = f"Invalid cache key: {key!r}"
            raise ValueError(msg)
        return self.cache_dir / f"{key}{suffix}"

    def get_or_render(
        self, key: str, render_fn: Callable[[], str], *, suffix: str = ".html"
    ) -> str:
        """Return the cached output for key, calling render_fn only on a miss."""
        output = self.path_for(key, suffix)
        if not self.disabled and output.exists():
            self.hits += 1
            logger.debug("load from cache: {}", output)
            return output.read_text(encoding="utf-8")

        self.misses += 1
        rendered = render_fn()
        self._store(output, rendered)
        return rendered

    def _store(self, output: Path, rendered: str) -> None:
        # Write to a temporary file first so readers never see a half-written entry.
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(rendered)
            os.replace(tmp_name, output)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("stored in cache: {}", output)
