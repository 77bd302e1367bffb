"""Day-bucket index over a conversation log.

The index file starts with the conversation's display name and then holds
one fixed-size entry per calendar day that has messages:

    uint8   name_len
    bytes   name        UTF-8
    repeated:
        uint16  day     days since epoch
        uint40  offset  byte offset of the day's first record in the log
"""

import struct
from bisect import bisect_left
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from chatlog_import.logstore.serializer import to_epoch_seconds
from chatlog_import.models import MessageRecord

SECONDS_PER_DAY = 86400
OFFSET_BYTES = 5
ENTRY_SIZE = 2 + OFFSET_BYTES
MAX_DAY = 0xFFFF

_DAY = struct.Struct("<H")


@dataclass
class IndexItem:
    """In-memory view of one conversation's index."""

    name: str
    dates: list[int] = field(default_factory=list)
    offsets: list[int] = field(default_factory=list)


# Index state for every conversation touched in a run, keyed by conversation key
LogIndex = dict[str, IndexItem]


def day_number(message: MessageRecord) -> int:
    """Calendar day of a record, counted from the epoch."""
    return to_epoch_seconds(message.time) // SECONDS_PER_DAY


def day_from_date(value: date) -> int:
    return (value - date(1970, 1, 1)).days


def check_index(
    index: LogIndex,
    message: MessageRecord,
    key: str,
    name: str,
    size: int,
) -> bytes | None:
    """Build the index bytes to append before writing a record, if any.

    A new entry is produced only when the record starts a day later than the
    last indexed one. The first entry for a conversation is prefixed with the
    index file header.

    Args:
        index: Index state for the current run, updated in place
        message: Record about to be written
        key: Conversation key
        name: Conversation display name
        size: Current byte length of the log, i.e. where the record will start

    Returns:
        Bytes to append to the index file, or None

    Raises:
        ValueError: If the day, offset or name does not fit the index format.
            The index state is left unchanged.
    """
    day = day_number(message)
    item = index.get(key)
    if item is not None and item.dates and item.dates[-1] >= day:
        return None

    if not 0 <= day <= MAX_DAY:
        raise ValueError(f"Day out of range: {day}")
    if not 0 <= size < 1 << (8 * OFFSET_BYTES):
        raise ValueError(f"Offset out of range: {size}")

    header = b""
    if item is None:
        encoded_name = name.encode("utf-8")
        if len(encoded_name) > 0xFF:
            raise ValueError(f"Conversation name too long: {len(encoded_name)} bytes")
        header = bytes([len(encoded_name)]) + encoded_name
    entry = header + _DAY.pack(day) + size.to_bytes(OFFSET_BYTES, "little")

    if item is None:
        index[key] = item = IndexItem(name=name)
    item.dates.append(day)
    item.offsets.append(size)
    return entry


def read_index(path: Path) -> IndexItem | None:
    """Load an index file written by check_index.

    Returns:
        IndexItem, or None if the file does not exist

    Raises:
        ValueError: If the file is truncated
    """
    if not path.exists():
        return None

    data = path.read_bytes()
    if not data:
        raise ValueError(f"Empty index file: {path}")
    name_len = data[0]
    pos = 1 + name_len
    if len(data) < pos or (len(data) - pos) % ENTRY_SIZE:
        raise ValueError(f"Truncated index file: {path}")

    item = IndexItem(name=data[1:pos].decode("utf-8"))
    while pos < len(data):
        (day,) = _DAY.unpack_from(data, pos)
        offset = int.from_bytes(data[pos + 2:pos + ENTRY_SIZE], "little")
        item.dates.append(day)
        item.offsets.append(offset)
        pos += ENTRY_SIZE
    return item


def offset_for_day(item: IndexItem, day: int) -> int | None:
    """Offset of the first indexed day on or after the given day.

    Returns:
        Byte offset into the log, or None if every indexed day is earlier
    """
    position = bisect_left(item.dates, day)
    if position == len(item.dates):
        return None
    return item.offsets[position]
