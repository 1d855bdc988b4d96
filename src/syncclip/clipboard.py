#!/usr/bin/env python3
"""Platform clipboard access.

Writes go through pyperclip, which hands the text to the platform's
clipboard owner (xclip/xsel/wl-copy, pbcopy, or the Win32 API). The
owner keeps serving the selection after a one-shot CLI process exits.
"""

from __future__ import annotations

import logging

import pyperclip

logger = logging.getLogger(__name__)


class ClipboardError(Exception):
    """The platform clipboard could not be written."""

    pass


def write_clipboard_text(text: str) -> None:
    """Replace the platform clipboard with text.

    Args:
        text: Text to place on the clipboard.

    Raises:
        ClipboardError: If no clipboard mechanism is available or it fails.
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Cannot write clipboard: {e}") from e
    logger.debug("Wrote %d characters to clipboard", len(text))
