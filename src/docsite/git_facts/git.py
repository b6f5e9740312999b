# git.py
# Small, focused wrapper around the Git CLI.
# All tag and commit lookups go through here so the rest of the codebase
# never needs to call subprocess("git ...") directly. Read-only: nothing
# in this module creates or moves tags.

from __future__ import annotations

import subprocess
from typing import List, Optional


def _git(args: list[str], cwd: Optional[str] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Args:
        args: List of git arguments (e.g. ["tag", "--sort=committerdate"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        subprocess.CalledProcessError: if git exits non-zero.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=cwd,
        text=True,
    )
    return out.strip()


def tags_by_commit_date(cwd: Optional[str] = None) -> List[str]:
    """
    Return every tag name, oldest commit first.

    `--sort=committerdate` orders by the date of the commit the tag points
    at, so the last element is the most recently tagged commit.
    """
    out = _git(["tag", "--sort=committerdate"], cwd=cwd)
    if not out:
        return []
    return out.splitlines()


def short_sha(length: int = 12, cwd: Optional[str] = None) -> str:
    """Return the abbreviated SHA of HEAD, exactly `length` hex chars."""
    return _git(["rev-parse", f"--short={length}", "HEAD"], cwd=cwd)


def describe(cwd: Optional[str] = None) -> str:
    """
    Return `git describe --tags --always --dirty` for HEAD.

    On a tagged commit this is the tag itself (e.g. `v1.2.0`); otherwise
    something like `v1.2.0-3-gabc1234-dirty`, or a bare SHA when the
    repository has no tags at all.
    """
    return _git(["describe", "--tags", "--always", "--dirty"], cwd=cwd)
