"""Release records and their collation into a single tag timeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from .config import Repository
from .filters import TagFilter
from .utils import coerce_datetime, normalize_newlines
from .versions import sort_tags_desc


@dataclass(frozen=True)
class ReleaseRecord:
    """A single release as reported by a repository."""

    repo_index: int
    tag: str
    created_at: datetime
    body: Optional[str] = None

    @classmethod
    def from_payload(cls, repo_index: int, payload: Mapping[str, Any]) -> "ReleaseRecord":
        """Build a record from a GitHub release object."""
        tag = payload.get("tag_name")
        if not isinstance(tag, str) or not tag:
            raise ValueError(f"release without a tag name: {dict(payload)!r}")
        created_at = coerce_datetime(payload.get("created_at"))
        if created_at is None:
            raise ValueError(f"release {tag} has an invalid created_at value")
        created_at = created_at.astimezone(timezone.utc)
        body = payload.get("body")
        text = normalize_newlines(str(body)).strip() if body is not None else ""
        return cls(repo_index=repo_index, tag=tag, created_at=created_at, body=text or None)


@dataclass
class TagEntry:
    """Notes recorded for one tag across repositories.

    A repository index missing from ``notes`` never mentioned the tag; an
    index mapped to ``None`` released the tag without notes.
    """

    tag: str
    date: datetime
    notes: dict[int, Optional[str]] = field(default_factory=dict)

    def contributors(self) -> list[int]:
        """Return the indexes of repositories with non-empty notes."""
        return [index for index, note in self.notes.items() if note is not None]


@dataclass
class Collation:
    """Tag timeline built from every repository's releases."""

    entries: dict[str, TagEntry] = field(default_factory=dict)
    dates: dict[str, datetime] = field(default_factory=dict)
    chains: dict[int, dict[str, str]] = field(default_factory=dict)

    def ordered_tags(self) -> list[str]:
        """Return collated tags from newest to oldest version."""
        return sort_tags_desc(self.entries)

    def previous_tag(self, repo_index: int, tag: str) -> Optional[str]:
        """Return the release preceding ``tag`` in a repository, if chained."""
        return self.chains.get(repo_index, {}).get(tag)


def collate_releases(
    repositories: Sequence[Repository],
    releases: Mapping[int, Sequence[ReleaseRecord]],
    tag_filter: Optional[TagFilter] = None,
) -> Collation:
    """Collate newest-first releases per repository into a tag timeline.

    Repositories are processed in input order. A repository's notes are only
    recorded when it includes its own releases or an earlier repository
    already recorded the tag. Dates are set by the first record seen for a tag.
    Compare chains connect consecutive releases passing the filter.
    """
    tag_filter = tag_filter or TagFilter()
    collation = Collation()
    for repository in repositories:
        chain = collation.chains.setdefault(repository.index, {})
        newer: Optional[str] = None
        for record in releases.get(repository.index, ()):
            tag = record.tag
            entry = collation.entries.get(tag)
            if repository.include_releases or entry is not None:
                if entry is None:
                    entry = collation.entries[tag] = TagEntry(
                        tag=tag, date=collation.dates.get(tag, record.created_at)
                    )
                entry.notes[repository.index] = record.body
            collation.dates.setdefault(tag, record.created_at)
            if not tag_filter.include_tag(tag):
                continue
            if newer is not None:
                chain[newer] = tag
            newer = tag
    return collation
