"""Ordering keys for chapter directories: '20-hello-world' -> (20, 'hello-world')."""

import re

from loguru import logger

# Larger than any 8-digit prefix, so unordered directories sort last.
SENTINEL_ORDER = 100_000_000

_ORDER_PREFIX = re.compile(r"^(\d{1,8})[-._](.+)$")


def extract_order_key(name: str) -> tuple[int, str]:
    """Split a directory name into (order, slug).

    Names without a numeric prefix get SENTINEL_ORDER and keep the whole
    name as slug. Never raises.
    """
    m = _ORDER_PREFIX.match(name)
    if m is None:
        logger.warning(
            "folder will be sorted last as no order can be extracted from its name: {}", name
        )
        return SENTINEL_ORDER, name
    return int(m.group(1)), m.group(2)


def sort_key(name: str) -> tuple[int, str, str]:
    """Total ordering for sibling directories: order, then slug, then raw name."""
    order, slug = extract_order_key(name)
    return order, slug, name
