"""Version-aware ordering of release tags."""

from __future__ import annotations

import re
from typing import Iterable

from packaging.version import InvalidVersion, Version

_RELEASE_PATTERN = re.compile(r"^(?P<release>\d+(?:\.\d+)*)(?P<suffix>.*)$", re.DOTALL)
_COMPONENT_PATTERN = re.compile(r"\d+|[^\d._\-+]+")

# Suffix component ranks. The end of a tag ranks above pre-release words and
# below numbers and post-release words, so 1.0-rc1 < 1.0 < 1.0-1 < 1.0-pl1.
_RANK_OTHER = 0
_RANK_DEV = 1
_RANK_ALPHA = 2
_RANK_BETA = 3
_RANK_RC = 4
_RANK_END = 5
_RANK_NUMBER = 6
_RANK_POST = 7

_WORD_RANKS = {
    "dev": _RANK_DEV,
    "alpha": _RANK_ALPHA,
    "a": _RANK_ALPHA,
    "beta": _RANK_BETA,
    "b": _RANK_BETA,
    "rc": _RANK_RC,
    "c": _RANK_RC,
    "pre": _RANK_RC,
    "preview": _RANK_RC,
    "pl": _RANK_POST,
    "p": _RANK_POST,
    "post": _RANK_POST,
}
_PRE_RANKS = {"a": _RANK_ALPHA, "b": _RANK_BETA, "rc": _RANK_RC}

Component = tuple[int, int, str]
VersionKey = tuple[tuple[int, ...], tuple[Component, ...]]

_END: Component = (_RANK_END, 0, "")


def _strip_prefix(tag: str) -> str:
    if tag.startswith(("v", "V")):
        return tag[1:]
    return tag


def _release(parts: Iterable[int]) -> tuple[int, ...]:
    release = list(parts)
    while release and release[-1] == 0:
        release.pop()
    return tuple(release)


def _number(value: int) -> Component:
    return (_RANK_NUMBER, value, "")


def _word(text: str) -> Component:
    lowered = text.lower()
    return (_WORD_RANKS.get(lowered, _RANK_OTHER), 0, lowered)


def _pep440_key(version: Version) -> VersionKey:
    suffix: list[Component] = []
    if version.pre is not None:
        letter, number = version.pre
        suffix += [(_PRE_RANKS[letter], 0, letter), _number(number)]
    if version.post is not None:
        suffix += [(_RANK_POST, 0, "post"), _number(version.post)]
    if version.dev is not None:
        suffix += [(_RANK_DEV, 0, "dev"), _number(version.dev)]
    suffix.append(_END)
    return (_release(version.release), tuple(suffix))


def _fallback_key(tag: str) -> VersionKey:
    match = _RELEASE_PATTERN.match(tag)
    if match is None:
        release: tuple[int, ...] = ()
        rest = tag
    else:
        release = _release(int(part) for part in match.group("release").split("."))
        rest = match.group("suffix")
    suffix = [
        _number(int(part)) if part.isdigit() else _word(part)
        for part in _COMPONENT_PATTERN.findall(rest)
    ]
    suffix.append(_END)
    return (release, tuple(suffix))


def version_key(tag: str) -> VersionKey:
    """Return a sort key for a release tag.

    Tags compare by their numeric release components first (a leading ``v``
    is ignored and trailing zeros do not count), then by what follows:
    pre-release words such as ``alpha`` or ``rc`` sort before the bare
    release, numbers and post-release words after it. Tags that parse as
    PEP 440 versions are read through ``packaging``; other tags, such as
    SemVer pre-releases like ``2.0.0-alpha.beta``, are split into components.
    Tags without a leading number sort below every numbered tag.
    """
    text = _strip_prefix(tag)
    try:
        return _pep440_key(Version(text))
    except InvalidVersion:
        return _fallback_key(text)


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 depending on how ``left`` orders against ``right``."""
    left_key = version_key(left)
    right_key = version_key(right)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def sort_tags_desc(tags: Iterable[str]) -> list[str]:
    """Return tags from newest to oldest; equal versions keep their order."""
    return sorted(tags, key=version_key, reverse=True)
