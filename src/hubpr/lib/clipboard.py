"""Clipboard support via pbcopy (macOS) or xclip (X11)."""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Tried in order; the first one on PATH wins.
_CLIPBOARD_COMMANDS = [
    ["pbcopy"],
    ["xclip", "-selection", "clipboard"],
]


@dataclass(frozen=True)
class ClipboardCapability:
    """Result of probing the host for a clipboard utility."""

    command: Optional[tuple[str, ...]] = None

    @property
    def available(self) -> bool:
        return self.command is not None


def detect_clipboard() -> ClipboardCapability:
    for cmd in _CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]):
            logger.debug(f"Using clipboard utility: {cmd[0]}")
            return ClipboardCapability(command=tuple(cmd))
    return ClipboardCapability()


def copy_to_clipboard(text: str, capability: ClipboardCapability) -> bool:
    """Pipe text into the detected clipboard utility.

    Returns:
        True if the text was copied, False if no utility is available or
        the utility failed. Failures are logged, not raised.
    """
    if not capability.available:
        logger.warning("No clipboard utility found (install pbcopy or xclip); URL not copied.")
        return False

    cmd = list(capability.command)
    logger.debug(f"Running: {' '.join(cmd)}")
    # xclip forks a child that keeps serving the selection; it must not
    # inherit our pipes or run() waits for it.
    result = subprocess.run(
        cmd,
        input=text,
        text=True,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    if result.returncode != 0:
        logger.warning(f"{cmd[0]} failed (exit {result.returncode}); URL not copied.")
        return False
    return True
