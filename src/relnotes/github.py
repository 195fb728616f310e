"""Retrieval of release records through the GitHub CLI."""

from __future__ import annotations

import json
import shlex
import shutil
import subprocess
from typing import Optional, Sequence

from .config import DEFAULT_CACHE_TTL, Repository
from .releases import ReleaseRecord
from .utils import log_debug, log_info, pluralize

GITHUB_API_URL = "https://api.github.com"
RELEASES_PER_PAGE = 100
RELEASE_FIELDS_FILTER = ".[] | {tag_name, created_at, body}"


def releases_endpoint(repository: Repository) -> str:
    return f"repos/{repository.owner}/{repository.name}/releases"


def _find_gh() -> str:
    gh_path = shutil.which("gh")
    if gh_path is None:
        raise RuntimeError("the 'gh' CLI is required but was not found in PATH.")
    return gh_path


def build_gh_command(
    gh_path: str,
    repository: Repository,
    *,
    cache_ttl: Optional[str] = DEFAULT_CACHE_TTL,
    refresh: bool = False,
) -> list[str]:
    """Return the ``gh api`` invocation listing every release of a repository."""
    command = [gh_path, "api", "--paginate", "--jq", RELEASE_FIELDS_FILTER]
    if cache_ttl and not refresh:
        command.extend(["--cache", cache_ttl])
    command.append(f"{releases_endpoint(repository)}?per_page={RELEASES_PER_PAGE}")
    return command


def parse_release_lines(repository: Repository, output: str) -> list[ReleaseRecord]:
    """Parse one JSON release object per line, preserving their order."""
    records: list[ReleaseRecord] = []
    for number, line in enumerate(output.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"unexpected output from gh for {repository.slug} (line {number}): {exc}"
            ) from exc
        if not isinstance(payload, dict):
            raise ValueError(f"unexpected release payload for {repository.slug}: {payload!r}")
        records.append(ReleaseRecord.from_payload(repository.index, payload))
    return records


def fetch_releases(
    repository: Repository,
    *,
    cache_ttl: Optional[str] = DEFAULT_CACHE_TTL,
    refresh: bool = False,
) -> list[ReleaseRecord]:
    """Return the releases of one repository, newest first.

    ``gh`` follows pagination and handles authentication (``GH_TOKEN``,
    ``GITHUB_TOKEN`` or a stored login). Responses are cached for
    ``cache_ttl`` unless ``refresh`` is set.
    """
    gh_path = _find_gh()
    log_info(f"retrieving releases from {GITHUB_API_URL}/{releases_endpoint(repository)}")
    command = build_gh_command(gh_path, repository, cache_ttl=cache_ttl, refresh=refresh)
    log_debug(f"running {' '.join(shlex.quote(part) for part in command)}")
    try:
        result = subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise RuntimeError("the 'gh' CLI is required but was not found in PATH.") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        raise RuntimeError(
            f"failed to retrieve releases from {repository.slug}: {detail}"
        ) from exc
    records = parse_release_lines(repository, result.stdout)
    log_info(f"{pluralize(len(records), 'release')} found")
    return records


def fetch_all_releases(
    repositories: Sequence[Repository],
    *,
    cache_ttl: Optional[str] = DEFAULT_CACHE_TTL,
    refresh: bool = False,
) -> dict[int, list[ReleaseRecord]]:
    """Fetch every repository in order and key the releases by repository index."""
    return {
        repository.index: fetch_releases(repository, cache_ttl=cache_ttl, refresh=refresh)
        for repository in repositories
    }
