"""Tag selection by pattern and version window."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Pattern

from .versions import version_key


def _compile(option: str, pattern: Optional[str]) -> Optional[Pattern[str]]:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"invalid {option} pattern {pattern!r}: {exc}") from exc


@dataclass
class TagFilter:
    """Include/exclude patterns plus an optional ``[from_tag, to_tag]`` window.

    Patterns use search semantics, so ``^`` or ``$`` must be given explicitly
    to anchor them.
    """

    include: Optional[str] = None
    exclude: Optional[str] = None
    from_tag: Optional[str] = None
    to_tag: Optional[str] = None
    _include_re: Optional[Pattern[str]] = field(init=False, repr=False, default=None)
    _exclude_re: Optional[Pattern[str]] = field(init=False, repr=False, default=None)

    def __post_init__(self) -> None:
        self._include_re = _compile("include", self.include)
        self._exclude_re = _compile("exclude", self.exclude)

    def include_tag(self, tag: str, *, check_from_to: bool = True) -> bool:
        """Return True if ``tag`` passes the patterns and, optionally, the lower bound."""
        if self._exclude_re is not None and self._exclude_re.search(tag):
            return False
        if self._include_re is not None and not self._include_re.search(tag):
            return False
        if check_from_to and self.from_tag and version_key(tag) < version_key(self.from_tag):
            return False
        return True

    def is_lower_bound(self, tag: str) -> bool:
        return self.from_tag is not None and tag == self.from_tag

    def select(self, tags: Iterable[str]) -> Iterator[str]:
        """Yield the tags to render from a newest-first sequence.

        Tags newer than ``to_tag`` are skipped. Iteration stops after
        ``from_tag``, which is yielded itself if it passes the patterns.
        """
        started = self.to_tag is None
        for tag in tags:
            if not started:
                if tag != self.to_tag:
                    continue
                started = True
            if self.include_tag(tag, check_from_to=False):
                yield tag
            if self.is_lower_bound(tag):
                return
