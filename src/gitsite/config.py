"""Site configuration: paths for one build plus the merged site.yml settings."""

import copy
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

# Directory with site sources. First directory which is found is used.
SOURCE_DIRECTORIES: list[Path] = [
    Path("source"),
    Path("."),
]

DEFAULT_SETTINGS: dict[str, Any] = {
    "site": {
        "title": "GitSite",
        "description": "Powered by GitSite",
        "keywords": "gitsite, git",
        "theme": "default",
        "language": "en-US",
        "rootPath": "",
        "navigation": [],
        "blogs": {"title": "Blogs"},
        "books": {"indexMarker": True},
        "search": {"type": "browser"},
        "integration": {},
    },
    "build": {"copy": ["favicon.ico", "robots.txt", "ads.txt"]},
}


@dataclass(frozen=True)
class SiteConfig:
    """Everything a build needs to know about where things live.

    Constructed once at startup and passed to every component.
    """

    source_dir: Path
    output_dir: Path
    cache_dir: Path
    themes_dir: Path
    disable_cache: bool = False
    settings: dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_SETTINGS))

    @property
    def root_path(self) -> str:
        return str(self.settings.get("site", {}).get("rootPath") or "")

    @property
    def theme_dir(self) -> Path:
        """Directory of the theme named by site.theme."""
        return self.themes_dir / str(self.settings.get("site", {}).get("theme") or "default")


def resolve_source_directory() -> Path:
    """Return the first existing site source directory candidate."""
    for candidate in SOURCE_DIRECTORIES:
        if (candidate / "site.yml").is_file():
            return candidate.resolve()
    return SOURCE_DIRECTORIES[0].resolve()


def _merge_defaults(target: dict[str, Any], defaults: dict[str, Any]) -> None:
    """Fill keys missing from target with defaults, recursively."""
    for key, value in defaults.items():
        if key not in target:
            target[key] = copy.deepcopy(value)
        elif isinstance(target[key], dict) and isinstance(value, dict):
            _merge_defaults(target[key], value)


def _add_camel_case_aliases(obj: Any) -> None:
    """Copy key 'abc-xyz' to 'abcXyz' recursively, keeping explicit keys."""
    if not isinstance(obj, dict):
        return
    aliases: dict[str, Any] = {}
    for key, value in obj.items():
        _add_camel_case_aliases(value)
        if isinstance(key, str) and key.find("-") > 0:
            alias = re.sub(r"-([a-z])", lambda m: m.group(1).upper(), key)
            aliases.setdefault(alias, value)
    for alias, value in aliases.items():
        obj.setdefault(alias, value)


def load_site_settings(source_dir: Path) -> dict[str, Any]:
    """Load site.yml from source_dir and merge it over DEFAULT_SETTINGS."""
    site_yml = source_dir / "site.yml"
    settings: dict[str, Any] = {}
    if site_yml.is_file():
        loaded = yaml.safe_load(site_yml.read_text(encoding="utf-8"))
        if loaded is not None and not isinstance(loaded, dict):
            msg = f"{site_yml} must contain a mapping, got {type(loaded).__name__}"
            raise ValueError(msg)
        settings = loaded or {}
    else:
        logger.debug("No site.yml in {}, using defaults", source_dir)
    _add_camel_case_aliases(settings)
    _merge_defaults(settings, DEFAULT_SETTINGS)
    return settings


def build_config(
    source_dir: Path,
    output_dir: Path,
    *,
    cache_dir: Path | None = None,
    themes_dir: Path | None = None,
    disable_cache: bool = False,
) -> SiteConfig:
    """Resolve paths and load settings into a SiteConfig."""
    source_dir = source_dir.resolve()
    output_dir = output_dir.resolve()
    return SiteConfig(
        source_dir=source_dir,
        output_dir=output_dir,
        cache_dir=(cache_dir or output_dir.parent / ".cache").resolve(),
        themes_dir=(themes_dir or source_dir.parent / "themes").resolve(),
        disable_cache=disable_cache,
        settings=load_site_settings(source_dir),
    )
