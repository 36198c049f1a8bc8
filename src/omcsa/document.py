"""Marker-region editing of the host document (``.claude/CLAUDE.md``).

Everything between ``MARKER_START`` and ``MARKER_END`` belongs to omcsa and
is rewritten wholesale; everything outside is preserved byte-for-byte.
"""

import re
from typing import Optional

from .models import MARKER_END, MARKER_START

_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def _marker_span(content: str) -> Optional[tuple[int, int]]:
    """(start, end) offsets of the marker region including both markers, if present."""
    start = content.find(MARKER_START)
    if start == -1:
        return None
    end = content.find(MARKER_END, start + len(MARKER_START))
    if end == -1:
        return None
    return start, end + len(MARKER_END)


def has_section(content: str) -> bool:
    return _marker_span(content) is not None


def update_document(existing: str, section: str) -> str:
    """Insert or replace the generated section.

    With both markers present the region is replaced in place. Otherwise the
    section is appended after exactly one blank line.
    """
    span = _marker_span(existing)
    if span is not None:
        start, end = span
        return existing[:start] + section + existing[end:]

    if not existing.strip():
        return section + "\n"

    separator = "\n" if existing.endswith("\n") else "\n\n"
    return f"{existing}{separator}{section}\n"


def remove_section(content: str) -> str:
    """Remove the generated section and normalize the surrounding blank lines.

    Content without a complete marker pair is returned unchanged.
    """
    span = _marker_span(content)
    if span is None:
        return content

    start, end = span
    remaining = content[:start] + content[end:]
    return _EXCESS_NEWLINES.sub("\n\n", remaining).strip() + "\n"
