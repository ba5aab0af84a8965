"""Interactive title/description editing through the user's $EDITOR."""

import logging
import os
import tempfile
from pathlib import Path

import click

from hubpr.lib.errors import EditAbortedError, HubPrError

logger = logging.getLogger(__name__)

COMMENT_CHAR = "#"

_HELP_BLOCK = """\
# Requesting a pull request for {head} into {base}.
#
# Write a message for this pull request. The first line
# is the title, the text after the blank line is the description.
# Lines starting with '#' are ignored, and an empty title aborts."""


def render_edit_buffer(title: str, body: str, head: str, base: str) -> str:
    """Build the initial editor contents: title, blank line, body, help."""
    return f"{title}\n\n{body}\n{_HELP_BLOCK.format(head=head, base=base)}\n"


def parse_edit_buffer(text: str) -> tuple[str, str]:
    """Split an edited buffer into (title, body).

    Comment lines are dropped first. The first remaining line is the title;
    the second is the separator and is skipped; the rest is the body.
    """
    lines = [line for line in text.splitlines() if not line.startswith(COMMENT_CHAR)]
    title = lines[0].strip() if lines else ""
    body = "\n".join(lines[2:]).strip("\n").rstrip()
    return title, body


def edit_title_and_body(title: str, body: str, head: str, base: str, editor: str) -> tuple[str, str]:
    """Open editor on a temporary file and return the edited (title, body).

    The temporary file is removed whether editing succeeds or not.

    Raises:
        EditAbortedError: If the edited title is empty.
        HubPrError: If the editor exits with an error.
    """
    fd, name = tempfile.mkstemp(prefix="PULLREQ_EDITMSG-", suffix=".md", text=True)
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(render_edit_buffer(title, body, head, base))

        logger.debug(f"Running: {editor} {path}")
        try:
            click.edit(filename=str(path), editor=editor)
        except click.ClickException as e:
            raise HubPrError(f"Editor '{editor}' failed: {e.format_message()}") from e

        new_title, new_body = parse_edit_buffer(path.read_text(encoding="utf-8"))
    finally:
        path.unlink(missing_ok=True)

    if not new_title:
        raise EditAbortedError()
    return new_title, new_body
