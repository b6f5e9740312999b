# versioning.py
# Version strings for npm publishing: the latest release tag, the working
# (possibly pre-release) version, and the date+sha "hash version" used for
# snapshot publishing.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, TYPE_CHECKING

from .git_facts.git import describe, short_sha, tags_by_commit_date

if TYPE_CHECKING:
    from .config import SiteConfig


DEFAULT_TAG_MARKER = "v"
HASH_LENGTH = 12


@dataclass
class NoReleaseTagFound(Exception):
    marker: str
    tag_count: int = 0

    def __str__(self) -> str:
        if self.tag_count == 0:
            return "No git tags found; cannot determine a release version."
        return (
            f"None of the {self.tag_count} git tag(s) start with '{self.marker}'; "
            "cannot determine a release version."
        )


def normalize_version(version: str) -> str:
    """
    Make a version acceptable to the npm registry.

    `+` (semver build metadata) is replaced with `--`. Applying this twice
    gives the same result as applying it once.
    """
    return version.replace("+", "--")


def select_release_tag(tags: Iterable[str], marker: str = DEFAULT_TAG_MARKER) -> str:
    """
    Pick the release version from tags ordered oldest-first.

    Only tags starting with `marker` qualify; the last one wins and is
    returned without its marker (`v1.2.0` -> `1.2.0`).
    """
    tags = list(tags)
    releases = [t for t in tags if t.startswith(marker)]
    if not releases:
        raise NoReleaseTagFound(marker=marker, tag_count=len(tags))
    return releases[-1][len(marker):]


def resolve_release_version(
    marker: str = DEFAULT_TAG_MARKER,
    tags: Optional[Iterable[str]] = None,
    cwd: Optional[str] = None,
) -> str:
    """Return the marker-stripped form of the most recently committed release tag."""
    if tags is None:
        tags = tags_by_commit_date(cwd=cwd)
    return select_release_tag(tags, marker)


def hash_version(
    now: Optional[datetime] = None,
    sha: Optional[str] = None,
    cwd: Optional[str] = None,
) -> str:
    """
    Return `<YYYY.MM.DD>-<12 hex chars>` for today's UTC date and HEAD.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    sha = sha or short_sha(HASH_LENGTH, cwd=cwd)
    return f"{now:%Y.%m.%d}-{sha[:HASH_LENGTH]}"


def working_version(config: "SiteConfig", cwd: Optional[str] = None) -> str:
    """
    Return the project's current build version.

    An explicit `config.version` wins. Without one, fall back to
    `git describe`, with the release marker stripped when present.
    """
    if config.version:
        return config.version

    described = describe(cwd=cwd)
    marker = config.release_tag_marker
    if marker and described.startswith(marker):
        return described[len(marker):]
    return described
