"""Git queries with explicit error handling.

Every operation raises on failure; nothing is silently ignored.
Uses subprocess to call git directly; hubpr never writes to the repository.
"""

import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Optional

from hubpr.lib.errors import HubPrError

logger = logging.getLogger(__name__)

# owner/repo out of https://github.com/o/r(.git), git@github.com:o/r(.git)
# and ssh://git@github.com/o/r(.git)
_GITHUB_URL_RE = re.compile(
    r"^(?:https://(?:[^@/]+@)?github\.com/"
    r"|git@github\.com:"
    r"|ssh://git@github\.com/)"
    r"(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$"
)


class GitError(HubPrError):
    """Raised when a git operation fails."""

    def __init__(self, message: str, stderr: str = "", exit_code: int = -1):
        super().__init__(message)
        self.stderr = stderr
        self.exit_code = exit_code


@dataclass(frozen=True)
class Remote:
    """One line of `git remote -v` output."""

    name: str
    url: str
    direction: str  # "fetch" or "push"


@dataclass(frozen=True)
class GitContext:
    """Repository coordinates inferred from the local checkout.

    owner and contributor are the same login when inferred from a single
    remote; they differ once the user targets another owner with -o.
    Fields are empty strings when no GitHub remote is configured.
    """

    branch: str
    owner: str
    repo: str
    contributor: str


def _run_git(args: list[str], check: bool = True) -> subprocess.CompletedProcess:
    """Run a git command and return the result.

    Args:
        args: Git command arguments (without 'git' prefix).
        check: If True, raise GitError on non-zero exit.

    Returns:
        CompletedProcess result.

    Raises:
        GitError: If the command fails and check is True.
    """
    cmd = ["git"] + args
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise GitError("git executable not found on PATH.") from e

    if check and result.returncode != 0:
        logger.debug(f"stderr: {result.stderr}")
        raise GitError(
            f"git {' '.join(args)} failed (exit {result.returncode}): {result.stderr.strip()}",
            stderr=result.stderr,
            exit_code=result.returncode,
        )

    return result


def get_current_branch() -> str:
    """Return the name of the checked-out branch.

    Raises:
        GitError: If not inside a git repository.
    """
    result = _run_git(["rev-parse", "--abbrev-ref", "HEAD"])
    branch = result.stdout.strip()
    if branch == "HEAD":
        logger.warning("Detached HEAD; pass the head branch with -h.")
    return branch


def list_remotes() -> list[Remote]:
    """Return the configured remotes as parsed from `git remote -v`."""
    result = _run_git(["remote", "-v"])
    remotes = []
    for line in result.stdout.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        direction = parts[2].strip("()") if len(parts) > 2 else "fetch"
        remotes.append(Remote(name=parts[0], url=parts[1], direction=direction))
    return remotes


def parse_github_url(url: str) -> Optional[tuple[str, str]]:
    """Extract (owner, repo) from a GitHub remote URL.

    Args:
        url: HTTPS, scp-style SSH or ssh:// remote URL.

    Returns:
        (owner, repo) with any trailing '.git' removed, or None if the URL
        does not point at github.com.
    """
    match = _GITHUB_URL_RE.match(url.strip())
    if not match:
        return None
    return match.group("owner"), match.group("repo")


def find_github_remote(remotes: list[Remote]) -> Optional[tuple[str, str]]:
    """Pick the push remote to infer owner/repo from.

    A push-capable GitHub remote named 'origin' wins; otherwise the first
    push-capable GitHub remote in `git remote -v` order is used.
    """
    candidates = []
    for remote in remotes:
        if remote.direction != "push":
            continue
        parsed = parse_github_url(remote.url)
        if parsed:
            candidates.append((remote.name, parsed))

    for name, parsed in candidates:
        if name == "origin":
            return parsed
    if candidates:
        return candidates[0][1]
    return None


def infer_git_context() -> GitContext:
    """Read branch, owner, repo and contributor from the local checkout.

    Raises:
        GitError: If git cannot report the current branch or remotes.
    """
    branch = get_current_branch()
    parsed = find_github_remote(list_remotes())

    if parsed is None:
        logger.warning("No GitHub remote found; owner and repo must be given with -o/-r.")
        return GitContext(branch=branch, owner="", repo="", contributor="")

    owner, repo = parsed
    logger.debug(f"Inferred {owner}/{repo} on branch {branch}")
    return GitContext(branch=branch, owner=owner, repo=repo, contributor=owner)


def count_commits_ahead(base: str, head: str) -> int:
    """Count commits reachable from head but not from base.

    Raises:
        GitError: If either ref is unknown.
    """
    result = _run_git(["rev-list", "--count", f"{base}..{head}"])
    try:
        return int(result.stdout.strip())
    except ValueError:
        raise GitError(f"Unexpected output from git rev-list: '{result.stdout.strip()}'")


def get_commit_subject(ref: str) -> str:
    """Return the subject line of the commit at ref."""
    result = _run_git(["log", "-1", "--format=%s", ref])
    return result.stdout.strip()
