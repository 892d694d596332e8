"""Tests for ordering keys of chapter directory names."""

import pytest

from gitsite.core.tree.ordering import SENTINEL_ORDER, extract_order_key, sort_key


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("20-hello-world", (20, "hello-world")),
        ("1.intro", (1, "intro")),
        ("007_bond", (7, "bond")),
        ("12345678-max", (12345678, "max")),
    ],
)
def test_extract_order_key_parses_prefix(name: str, expected: tuple[int, str]) -> None:
    assert extract_order_key(name) == expected


@pytest.mark.parametrize("name", ["notes", "123456789-too-long", "10", "10-", "-10-x", "v2-api"])
def test_extract_order_key_without_prefix_uses_sentinel(name: str) -> None:
    assert extract_order_key(name) == (SENTINEL_ORDER, name)


def test_sentinel_is_larger_than_any_prefix() -> None:
    assert SENTINEL_ORDER > 99_999_999


def test_sort_key_orders_numerically_not_lexically() -> None:
    names = ["10-intro", "2-setup", "notes", "1-basics"]

    assert sorted(names, key=sort_key) == ["1-basics", "2-setup", "10-intro", "notes"]


def test_sort_key_breaks_slug_ties_by_raw_name() -> None:
    """Same order and slug: the raw directory name decides."""
    names = ["01-setup", "1-setup", "1_setup"]

    assert sorted(names, key=sort_key) == ["01-setup", "1-setup", "1_setup"]


def test_unordered_names_sort_last_by_name() -> None:
    names = ["zeta", "alpha", "99999999-last"]

    assert sorted(names, key=sort_key) == ["99999999-last", "alpha", "zeta"]
