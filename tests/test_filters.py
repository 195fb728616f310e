"""Tests for tag filtering and window selection."""

from __future__ import annotations

import pytest

from relnotes.filters import TagFilter

TAGS = ["v3.0.0", "v2.0.0", "v2.0.0-rc1", "v1.5.0", "v1.0.0", "v0.9.0"]


def test_default_filter_selects_everything() -> None:
    assert list(TagFilter().select(TAGS)) == TAGS


def test_window_is_inclusive_on_both_ends() -> None:
    tag_filter = TagFilter(from_tag="v1.0.0", to_tag="v2.0.0")
    assert list(tag_filter.select(TAGS)) == ["v2.0.0", "v2.0.0-rc1", "v1.5.0", "v1.0.0"]


def test_unknown_to_tag_selects_nothing() -> None:
    assert list(TagFilter(to_tag="v9.9.9").select(TAGS)) == []


def test_unknown_from_tag_does_not_truncate() -> None:
    assert list(TagFilter(from_tag="v1.1.0").select(TAGS)) == TAGS


def test_patterns_use_search_semantics() -> None:
    tag_filter = TagFilter(exclude="-rc")
    assert "v2.0.0-rc1" not in list(tag_filter.select(TAGS))
    assert TagFilter(include=r"\.0\.0$").include_tag("v1.0.0")
    assert not TagFilter(include=r"\.0\.0$").include_tag("v1.5.0")


def test_lower_bound_check_is_optional() -> None:
    tag_filter = TagFilter(from_tag="v1.0.0")
    assert not tag_filter.include_tag("v0.9.0")
    assert tag_filter.include_tag("v0.9.0", check_from_to=False)
    assert tag_filter.is_lower_bound("v1.0.0")


def test_invalid_pattern_is_reported() -> None:
    with pytest.raises(ValueError, match="invalid exclude pattern"):
        TagFilter(exclude="(")
