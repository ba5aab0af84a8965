"""User-facing error types.

Every error raised by hubpr derives from HubPrError. The CLI entry point
turns these into a message on stderr and exit status 1; nothing below the
entry point calls sys.exit.
"""


class HubPrError(Exception):
    """Base class for errors that terminate a hubpr invocation."""


class MissingTokenError(HubPrError):
    """Raised when the access token file is missing or empty."""

    def __init__(self, token_file):
        super().__init__(
            f"No GitHub access token found in {token_file}.\n"
            "Generate a personal access token with the 'repo' scope at "
            "https://github.com/settings/tokens and save it to that file."
        )
        self.token_file = token_file


class AmbiguousTitleError(HubPrError):
    """Raised when no title was given and it cannot be taken from a single commit."""

    def __init__(self, commit_count: int, base: str):
        super().__init__(
            f"Branch has {commit_count} commits ahead of '{base}'; "
            "cannot pick a title automatically. Pass one with -t."
        )
        self.commit_count = commit_count
        self.base = base


class EditAbortedError(HubPrError):
    """Raised when the editor buffer comes back without a title."""

    def __init__(self):
        super().__init__("Aborting due to empty pull request title.")
