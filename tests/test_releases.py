"""Tests for release records and tag collation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytest

from relnotes.config import build_repositories
from relnotes.filters import TagFilter
from relnotes.releases import ReleaseRecord, collate_releases


def record(index: int, tag: str, day: str, body: Optional[str] = None) -> ReleaseRecord:
    return ReleaseRecord.from_payload(
        index, {"tag_name": tag, "created_at": f"{day}T12:00:00Z", "body": body}
    )


def test_from_payload_normalizes_body() -> None:
    release = record(0, "v1.0.0", "2024-01-01", "  - one\r\n- two\r\n\r\n")
    assert release.body == "- one\n- two"
    assert release.created_at == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    assert record(0, "v1.0.0", "2024-01-01", " \n ").body is None


def test_from_payload_rejects_incomplete_records() -> None:
    with pytest.raises(ValueError, match="tag name"):
        ReleaseRecord.from_payload(0, {"created_at": "2024-01-01T00:00:00Z"})
    with pytest.raises(ValueError, match="created_at"):
        ReleaseRecord.from_payload(0, {"tag_name": "v1", "created_at": "yesterday"})


def test_secondary_notes_require_known_tag_or_included_releases() -> None:
    repositories = build_repositories(["acme/app", "acme/lib"])
    collation = collate_releases(
        repositories,
        {
            0: [record(0, "v1.0.0", "2024-01-05", "app")],
            1: [
                record(1, "v1.1.0", "2024-01-07", "lib only"),
                record(1, "v1.0.0", "2024-01-01", None),
            ],
        },
    )
    assert collation.ordered_tags() == ["v1.0.0"]
    entry = collation.entries["v1.0.0"]
    assert entry.notes == {0: "app", 1: None}
    assert entry.contributors() == [0]
    # The first repository to report a tag fixes its date.
    assert entry.date.day == 5
    assert collation.dates["v1.1.0"].day == 7


def test_included_secondary_releases_add_tags() -> None:
    repositories = build_repositories(["acme/app", "acme/lib"], releases=[None, True])
    collation = collate_releases(
        repositories,
        {0: [], 1: [record(1, "v0.2.0", "2024-02-01", "lib")]},
    )
    assert collation.entries["v0.2.0"].notes == {1: "lib"}


def test_chains_skip_filtered_tags() -> None:
    repositories = build_repositories(["acme/app"])
    releases = {
        0: [
            record(0, "v2.0.0", "2024-03-01"),
            record(0, "v2.0.0-rc1", "2024-02-01"),
            record(0, "v1.0.0", "2024-01-01"),
            record(0, "v0.9.0", "2023-12-01"),
        ]
    }
    collation = collate_releases(
        repositories, releases, TagFilter(exclude="-rc", from_tag="v1.0.0")
    )
    assert collation.previous_tag(0, "v2.0.0") == "v1.0.0"
    assert collation.previous_tag(0, "v1.0.0") is None
    # Filtered tags are still collated; rendering decides what to show.
    assert "v2.0.0-rc1" in collation.entries


def test_from_payload_converts_offsets_to_utc() -> None:
    release = record(0, "v1.0.0", "2024-01-01", None)
    shifted = ReleaseRecord.from_payload(
        0, {"tag_name": "v1.0.0", "created_at": "2024-01-01T23:30:00-05:00"}
    )
    assert shifted.created_at == datetime(2024, 1, 2, 4, 30, tzinfo=timezone.utc)
    assert shifted.created_at.utcoffset() == release.created_at.utcoffset()
