"""Pull request request model, head reference and title resolution."""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from hubpr.lib.errors import AmbiguousTitleError
from hubpr.lib.git_ops import count_commits_ahead, get_commit_subject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PullRequestRequest:
    """Body of POST /repos/{owner}/{repo}/pulls.

    Either title (with optional body) or issue is set, never both: GitHub
    treats a request with an issue as "turn this issue into a PR" and
    ignores any title.
    """

    head: str
    base: str
    title: Optional[str] = None
    body: Optional[str] = None
    issue: Optional[str] = None

    def __post_init__(self):
        if self.issue and (self.title or self.body):
            raise ValueError("A pull request takes either an issue or a title/body, not both.")
        if not self.issue and not self.title:
            raise ValueError("A pull request needs a title or an issue number.")

    def to_payload(self) -> dict:
        payload: dict = {"head": self.head, "base": self.base}
        if self.issue:
            payload["issue"] = int(self.issue) if self.issue.isdigit() else self.issue
            return payload
        payload["title"] = self.title
        if self.body:
            payload["body"] = self.body
        return payload

    def to_json(self) -> str:
        """Serialize to a single-line JSON document."""
        return json.dumps(self.to_payload())


def head_ref(branch: str, owner: str, contributor: str) -> str:
    """Return the head reference for a PR from branch.

    Cross-fork PRs must name the fork owner: 'contributor:branch'.
    """
    if contributor and owner != contributor:
        return f"{contributor}:{branch}"
    return branch


def resolve_title(base: str, head_branch: str) -> str:
    """Take the title from the only commit on head_branch that base lacks.

    Raises:
        AmbiguousTitleError: If there are zero or several such commits.
        GitError: If git cannot compare the branches.
    """
    count = count_commits_ahead(base, head_branch)
    logger.debug(f"{head_branch} is {count} commit(s) ahead of {base}")
    if count != 1:
        raise AmbiguousTitleError(count, base)
    return get_commit_subject(head_branch)
