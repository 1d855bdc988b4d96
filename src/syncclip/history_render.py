#!/usr/bin/env python3
"""Plain-text rendering of history entries.

Rendering never fails on odd entries: an image whose resource did not load
becomes a hidden-image placeholder and an entry with neither content nor
file renders an explicit unknown placeholder instead of a blank row.
"""

from __future__ import annotations

from typing import Callable, Collection, Iterable

from syncclip.models import EntryKind, HistoryEntry

EMPTY_HISTORY: str = "No clipboard history found"
UNKNOWN_PLACEHOLDER: str = "<unknown entry>"
EMPTY_CONTENT: str = "<empty content>"
HIDDEN_IMAGE: str = "<image unavailable>"

# Text bodies are clamped to this many lines.
MAX_BODY_LINES: int = 10


def entry_body(
    entry: HistoryEntry,
    resource_url: Callable[[str], str],
    unavailable: Collection[int] = (),
) -> str:
    """Return the body text shown for one entry.

    Args:
        entry: Entry to render.
        resource_url: Maps a stored filename to its URL.
        unavailable: Ids of entries whose resource failed to load.
    """
    if entry.content is None and entry.file_ref is None:
        return UNKNOWN_PLACEHOLDER
    if entry.kind is EntryKind.TEXT:
        return entry.content or EMPTY_CONTENT
    if entry.kind is EntryKind.IMAGE and entry.file_ref:
        if entry.id in unavailable:
            return HIDDEN_IMAGE
        return resource_url(entry.file_ref)
    return entry.file_ref or entry.content or UNKNOWN_PLACEHOLDER


def entry_header(entry: HistoryEntry, copied: bool = False) -> str:
    parts = [f"#{entry.id}", f"[{entry.kind.value}]"]
    if entry.pinned:
        parts.append("(pinned)")
    if entry.device:
        parts.append(f"@{entry.device}")
    if entry.timestamp:
        parts.append(entry.timestamp)
    if copied:
        parts.append("copied!")
    return " ".join(parts)


def _clamp(body: str) -> list[str]:
    lines = body.splitlines() or [""]
    if len(lines) > MAX_BODY_LINES:
        return lines[:MAX_BODY_LINES] + ["..."]
    return lines


def render_entry(
    entry: HistoryEntry,
    resource_url: Callable[[str], str],
    unavailable: Collection[int] = (),
    copied_id: int | None = None,
) -> str:
    header = entry_header(entry, copied=entry.id == copied_id)
    body = _clamp(entry_body(entry, resource_url, unavailable))
    return "\n".join([header] + [f"    {line}" for line in body])


def render_history(
    entries: Iterable[HistoryEntry],
    resource_url: Callable[[str], str],
    unavailable: Collection[int] = (),
    copied_id: int | None = None,
) -> str:
    """Render entries in the given order, one block per entry."""
    blocks = [render_entry(e, resource_url, unavailable, copied_id) for e in entries]
    if not blocks:
        return EMPTY_HISTORY
    return "\n".join(blocks)
