"""Tests for list merging across release notes."""

from __future__ import annotations

import pytest

from relnotes.merging import compile_list_pattern, merge_notes


def test_duplicate_items_are_dropped_in_first_seen_order() -> None:
    assert merge_notes(["- fix A", "- fix A\n- fix B"]) == "- fix A\n- fix B"


def test_duplicates_compare_normalized_whitespace() -> None:
    assert merge_notes(["- fix  A", "-  fix A\r\n* fix C"]) == "- fix  A\n* fix C"


def test_without_lists_notes_are_concatenated() -> None:
    assert merge_notes(["First paragraph.", "", "Second paragraph."]) == (
        "First paragraph.\n\nSecond paragraph."
    )


def test_prose_precedes_merged_list() -> None:
    notes = ["Changes:\n- x\n  continued\n- y", "Thanks to everyone.\n\n1. y\n2. z"]
    assert merge_notes(notes) == (
        "Changes:\n\nThanks to everyone.\n\n- x\n  continued\n- y\n1. y\n2. z"
    )


def test_lists_below_headings_are_grouped() -> None:
    notes = [
        "Intro text\n\n### Fixes\n\n- a\n- b",
        "### Fixes\n\n- b\n- c\n\nOutro",
    ]
    assert merge_notes(notes) == "Intro text\n\nOutro\n\n### Fixes\n\n- a\n- b\n- c"


def test_custom_pattern() -> None:
    assert merge_notes(["> one", "> one\n> two"], r"^> ") == "> one\n> two"


def test_invalid_pattern_raises_value_error() -> None:
    with pytest.raises(ValueError, match="invalid list pattern"):
        compile_list_pattern("[")
