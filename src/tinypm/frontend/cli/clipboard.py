"""Clipboard utilities for the CLI frontend.

Uses pyperclip for cross-platform clipboard access.
"""

from __future__ import annotations

import logging

import pyperclip

logger = logging.getLogger(__name__)


def copy_secret(secret: str) -> bool:
    """Copy a revealed password to the system clipboard.

    Returns False when no clipboard mechanism is available (headless
    sessions, missing xclip/xsel) so the UI can fall back to showing it.
    """
    try:
        pyperclip.copy(secret)
    except pyperclip.PyperclipException as exc:
        logger.warning("clipboard unavailable: %s", exc)
        return False
    return True
