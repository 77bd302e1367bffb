"""Splits a legacy transcript into logical message lines.

Message text may contain line breaks, so a line break only ends a logical
line when the text after it looks like the start of a new entry: either a
timestamped message header or an ad announcement. Ad announcements are
dropped up to the next such header.
"""

import re
from collections.abc import Iterator
from enum import Enum

BYTE_ORDER_MARK = "\ufeff"

# How far past a line break to look for the next entry's header
HEADER_LOOKAHEAD = 29
# How far into a logical line the ad marker may appear
AD_LOOKAHEAD = 14

AD_PATTERN = re.compile(r"Ad at \[.*?]:")
HEADER_PATTERN = re.compile(
    r"(Ad at \[.*?]:|\[\d{2}.\d{2}.*] (\[user][A-Za-z0-9 \-_]|[A-Za-z0-9 \-_]))"
)
LINE_BREAK = re.compile(r"\r\n|[\r\n]")


class ScanState(Enum):
    SCANNING = "scanning"
    SUPPRESSING_AD = "suppressing_ad"


def starts_with_header(content: str, position: int) -> bool:
    """Check whether an entry header begins at position."""
    return HEADER_PATTERN.match(content, position, position + HEADER_LOOKAHEAD) is not None


def starts_with_ad(content: str, position: int) -> bool:
    """Check whether the logical line at position is an ad announcement."""
    return AD_PATTERN.search(content, position, position + AD_LOOKAHEAD) is not None


def _state_at(content: str, position: int) -> ScanState:
    if starts_with_ad(content, position):
        return ScanState.SUPPRESSING_AD
    return ScanState.SCANNING


def iter_logical_lines(content: str) -> Iterator[str]:
    """Yield the logical lines of a transcript, without ad announcements.

    A CR LF pair counts as a single line break. Line breaks inside a logical
    line are kept as they appear in the source. The last line is yielded
    even when the file does not end with a line break.

    Args:
        content: Full text of one transcript file

    Yields:
        Logical lines, each starting with its entry header
    """
    if content.startswith(BYTE_ORDER_MARK):
        content = content[len(BYTE_ORDER_MARK):]

    start = 0
    state = _state_at(content, start)

    for line_break in LINE_BREAK.finditer(content):
        next_start = line_break.end()
        if not starts_with_header(content, next_start):
            continue
        if state is ScanState.SCANNING:
            yield content[start:line_break.start()]
        start = next_start
        state = _state_at(content, start)

    if state is ScanState.SCANNING and start < len(content):
        tail = content[start:].rstrip("\r\n")
        if tail:
            yield tail
