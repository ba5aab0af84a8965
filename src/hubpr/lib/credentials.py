"""Access token loading with fail-fast semantics."""

import logging
from pathlib import Path

from hubpr.lib.errors import MissingTokenError

logger = logging.getLogger(__name__)


def load_token(token_file: Path) -> str:
    """Read the personal access token from token_file.

    Args:
        token_file: Path to a file holding the token (surrounding
            whitespace is ignored).

    Returns:
        The token string.

    Raises:
        MissingTokenError: If the file is absent, unreadable or blank.
    """
    token_file = Path(token_file).expanduser()
    try:
        token = token_file.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.debug(f"Could not read {token_file}: {e}")
        raise MissingTokenError(token_file) from e

    if not token:
        raise MissingTokenError(token_file)

    logger.debug(f"Loaded access token from {token_file}")
    return token
