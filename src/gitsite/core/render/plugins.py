"""Argument and string helpers for block renderers."""

import re
from collections.abc import Callable, Iterable

_ARG_KEY_VALUE = re.compile(r"^([\w\-]*)=(.*)$")
_ARG_KEY_PRESENT = re.compile(r"^([\w\-]*)$")
_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")


def _unquote(s: str) -> str:
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        return s[1:-1]
    return s


def parse_args(args: Iterable[str]) -> dict[str, str | bool]:
    """Parse block arguments into a dict.

    ['WIDTH=123', 'autoplay', 'title="Hello"'] ->
    {'width': '123', 'autoplay': True, 'title': 'Hello'}

    Keys are lower-cased, values keep their case.
    """
    kv: dict[str, str | bool] = {}
    for arg in args:
        m = _ARG_KEY_PRESENT.match(arg)
        if m:
            kv[m.group(1).lower()] = True
            continue
        m = _ARG_KEY_VALUE.match(arg)
        if m:
            kv[m.group(1).lower()] = _unquote(m.group(2))
    return kv


def check_enum_arg(value: object, allowed: list[str]) -> str:
    """Match value case-insensitively against allowed; fall back to the first."""
    if isinstance(value, str):
        for candidate in allowed:
            if value.lower() == candidate.lower():
                return candidate
    return allowed[0]


def check_int_arg(
    value: object, default: int = 0, check_fn: Callable[[int], bool] | None = None
) -> int:
    """Parse an int argument, returning default if missing, invalid, or rejected."""
    m = _LEADING_INT.match(str(value))
    if m is None:
        return default
    n = int(m.group(1))
    if check_fn is not None and not check_fn(n):
        return default
    return n


def get_by_range(s: str, start: str, end: str) -> str:
    """get_by_range('<b>strong</b>', '<b>', '</b>') -> 'strong'"""
    n1 = s.find(start)
    if n1 < 0:
        msg = f"substring {start!r} not found"
        raise ValueError(msg)
    n2 = s.find(end, n1 + len(start))
    if n2 < 0:
        msg = f"substring {end!r} not found"
        raise ValueError(msg)
    return s[n1 + len(start) : n2]


def delete_all_by_range(s: str, start: str, end: str) -> str:
    """delete_all_by_range('Hello, <b>x</b>World<b>y</b>!', '<b>', '</b>') -> 'Hello, World!'"""
    while True:
        n1 = s.find(start)
        if n1 < 0:
            return s
        n2 = s.find(end, n1 + len(start))
        if n2 < 0:
            msg = f"substring {end!r} not found"
            raise ValueError(msg)
        s = s[:n1] + s[n2 + len(end) :]
