#!/usr/bin/env python3
"""hubpr: open a GitHub pull request for the current branch.

Reads the access token, infers owner/repo/branch from git, resolves the
title (from -t, the editor, or the branch's only commit), and POSTs the
pull request to the GitHub API. Prints the new pull request's URL.

All failures are explicit. Nothing proceeds silently with missing data.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from hubpr.lib.clipboard import copy_to_clipboard, detect_clipboard
from hubpr.lib.credentials import load_token
from hubpr.lib.editor import edit_title_and_body
from hubpr.lib.env_settings import EditorSettings, PathSettings
from hubpr.lib.errors import AmbiguousTitleError, HubPrError
from hubpr.lib.git_ops import infer_git_context
from hubpr.lib.github_api import (
    ApiRequest,
    GitHubApiError,
    GitHubClient,
    classify_error,
    describe_error,
    extract_pull_url,
)
from hubpr.lib.hubpr_config import load_config
from hubpr.lib.logging_config import setup_logging
from hubpr.lib.pull_request import PullRequestRequest, head_ref, resolve_title

logger = logging.getLogger("hubpr")


@dataclass(frozen=True)
class RunConfig:
    """Everything one invocation needs, resolved once at startup."""

    token: str
    owner: str
    repo: str
    contributor: str
    branch: str
    base: str
    title: Optional[str] = None
    description: Optional[str] = None
    issue: Optional[str] = None
    edit: bool = False
    copy: bool = False
    dry_run: bool = False
    wip: bool = False
    wip_label: str = "wip"
    editor: str = "vi"
    api_url: str = "https://api.github.com"
    timeout: Optional[float] = None

    @property
    def head(self) -> str:
        return head_ref(self.branch, self.owner, self.contributor)


def build_run_config(
    head: Optional[str] = None,
    repo: Optional[str] = None,
    owner: Optional[str] = None,
    base: Optional[str] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    issue: Optional[str] = None,
    edit: bool = False,
    copy: bool = False,
    dry_run: bool = False,
    wip: bool = False,
) -> RunConfig:
    """Merge environment, config file, token file, git state and flags.

    The token is loaded before git is consulted so a missing token fails
    fast.

    Raises:
        MissingTokenError: If the token file is absent or blank.
        GitError: If git cannot report branch or remotes.
        HubPrError: If the config file is missing or invalid.
    """
    paths = PathSettings()
    try:
        config = load_config(paths.config_path)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise HubPrError(f"Invalid hubpr config: {e}") from e

    token = load_token(paths.token_file)
    git = infer_git_context()

    return RunConfig(
        token=token,
        owner=owner or git.owner,
        repo=repo or git.repo,
        contributor=git.contributor,
        branch=head or git.branch,
        base=base or config.defaults.base_branch,
        title=title,
        description=description,
        issue=issue,
        edit=edit,
        copy=copy,
        dry_run=dry_run,
        wip=wip,
        wip_label=config.defaults.wip_label,
        editor=EditorSettings().command,
        api_url=config.api.url,
        timeout=config.api.timeout_seconds,
    )


def resolve_pull_request(cfg: RunConfig) -> PullRequestRequest:
    """Decide title/body (or issue) and build the request.

    Raises:
        AmbiguousTitleError: If no title can be determined and -e is off.
        EditAbortedError: If the editor returns an empty title.
    """
    if cfg.issue:
        if cfg.title or cfg.description:
            logger.warning(f"Issue #{cfg.issue} given; ignoring title and description.")
        return PullRequestRequest(head=cfg.head, base=cfg.base, issue=cfg.issue)

    title = cfg.title
    body = cfg.description or ""
    if not title:
        try:
            title = resolve_title(cfg.base, cfg.branch)
        except AmbiguousTitleError:
            if not cfg.edit:
                raise
            title = ""

    if cfg.edit:
        title, body = edit_title_and_body(title, body, cfg.head, cfg.base, cfg.editor)

    return PullRequestRequest(head=cfg.head, base=cfg.base, title=title, body=body or None)


def _label_issue(cfg: RunConfig, client: GitHubClient) -> None:
    request = client.labels_request(cfg.owner, cfg.repo, cfg.issue, [cfg.wip_label])
    if cfg.dry_run:
        click.echo(request.describe())
        return

    try:
        response = client.send(request)
    except GitHubApiError as e:
        logger.warning(f"Could not label issue #{cfg.issue} (non-blocking): {e}")
        return
    if not response.ok:
        logger.warning(
            f"Could not label issue #{cfg.issue} (non-blocking): {describe_error(response)}"
        )
    else:
        logger.info(f"Labelled issue #{cfg.issue} '{cfg.wip_label}'")


def create_pull_request(cfg: RunConfig, client: GitHubClient) -> Optional[str]:
    """Run the create flow and return the pull request URL.

    Returns None on a dry run, after printing the requests.

    Raises:
        GitHubApiError: If the API did not return a pull request URL. The
            raw response has already been printed to stdout.
    """
    pull = resolve_pull_request(cfg)

    if cfg.wip:
        if cfg.issue:
            _label_issue(cfg, client)
        else:
            logger.warning("-w only applies together with -i; no label set.")

    request: ApiRequest = client.pulls_request(cfg.owner, cfg.repo, pull)
    if cfg.dry_run:
        click.echo(request.describe())
        return None

    response = client.send(request)
    url = extract_pull_url(response)
    if url is None:
        click.echo(response.text)
        raise GitHubApiError(describe_error(response), classify_error(response), response.status)

    click.echo(url)
    if cfg.copy:
        copy_to_clipboard(url, detect_clipboard())
    return url


class _CleanUsageCommand(click.Command):
    """Command that prints usage on unknown flags and exits with status 0."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.show()
            ctx.exit(0)


@click.command(
    "hubpr",
    cls=_CleanUsageCommand,
    context_settings={"help_option_names": ["--help"]},
)
@click.option("-h", "--head", metavar="BRANCH", help="Head branch (default: current branch).")
@click.option("-r", "--repo", metavar="NAME", help="Target repository (default: from git remote).")
@click.option("-o", "--owner", metavar="LOGIN", help="Target owner (default: from git remote).")
@click.option("-b", "--base", metavar="BRANCH", help="Base branch (default: master).")
@click.option("-t", "--title", metavar="TEXT", help="Pull request title.")
@click.option(
    "-d",
    "--description",
    metavar="TEXT",
    help="Pull request description; '-' reads it from stdin.",
)
@click.option("-i", "--issue", metavar="NUMBER", help="Turn an existing issue into the pull request.")
@click.option("-e", "--edit", is_flag=True, help="Edit title and description in $EDITOR.")
@click.option("-c", "--copy", is_flag=True, help="Copy the pull request URL to the clipboard.")
@click.option("-f", "--dry-run", is_flag=True, help="Print the requests instead of sending them.")
@click.option("-w", "--wip", is_flag=True, help="Label the issue given with -i as work in progress.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr.")
def cli(
    head: Optional[str],
    repo: Optional[str],
    owner: Optional[str],
    base: Optional[str],
    title: Optional[str],
    description: Optional[str],
    issue: Optional[str],
    edit: bool,
    copy: bool,
    dry_run: bool,
    wip: bool,
    verbose: bool,
) -> None:
    """Open a GitHub pull request for the current branch."""
    setup_logging(verbose=verbose)

    if description == "-":
        description = click.get_text_stream("stdin").read().rstrip("\n")

    try:
        cfg = build_run_config(
            head=head,
            repo=repo,
            owner=owner,
            base=base,
            title=title,
            description=description,
            issue=issue,
            edit=edit,
            copy=copy,
            dry_run=dry_run,
            wip=wip,
        )
        logger.debug(f"Pull request {cfg.owner}/{cfg.repo}: {cfg.head} -> {cfg.base}")
        client = GitHubClient(cfg.token, api_url=cfg.api_url, timeout=cfg.timeout)
        create_pull_request(cfg, client)
    except GitHubApiError as e:
        click.echo(f"hubpr: {e.kind.value} error: {e}", err=True)
        sys.exit(1)
    except HubPrError as e:
        click.echo(f"hubpr: {e}", err=True)
        sys.exit(1)


def main() -> None:
    cli(prog_name="hubpr")


if __name__ == "__main__":
    main()
