"""Sequential reader for conversation logs written by ConversationLogWriter."""

from collections.abc import Iterator
from pathlib import Path

from chatlog_import.logstore.index import day_number, read_index
from chatlog_import.logstore.serializer import deserialize_message
from chatlog_import.models import MessageRecord


def iter_messages(path: Path, from_offset: int = 0) -> Iterator[MessageRecord]:
    """Yield records from a log file starting at a record boundary.

    Args:
        path: Log file path
        from_offset: Byte offset of the first record to read (e.g. from the index)

    Raises:
        ValueError: If the log contains a truncated or corrupt record
    """
    data = path.read_bytes()
    offset = from_offset
    while offset < len(data):
        message, offset = deserialize_message(data, offset)
        yield message


def read_messages(path: Path, from_offset: int = 0, limit: int | None = None) -> list[MessageRecord]:
    """Read up to limit records from a log file."""
    messages: list[MessageRecord] = []
    if not path.exists():
        return messages
    for message in iter_messages(path, from_offset):
        if limit is not None and len(messages) >= limit:
            break
        messages.append(message)
    return messages


def verify_log(log_path: Path, index_path: Path) -> list[str]:
    """Check that a log decodes cleanly and that its index points at records.

    Returns:
        Human-readable problems, empty if the pair is consistent
    """
    problems: list[str] = []
    data = log_path.read_bytes()

    boundaries: dict[int, int] = {}
    offset = 0
    while offset < len(data):
        try:
            message, next_offset = deserialize_message(data, offset)
        except ValueError as e:
            problems.append(str(e))
            break
        boundaries[offset] = day_number(message)
        offset = next_offset

    try:
        item = read_index(index_path)
    except ValueError as e:
        problems.append(str(e))
        return problems
    if item is None:
        if data:
            problems.append(f"Missing index for {log_path}")
        return problems

    previous = -1
    for day, indexed_offset in zip(item.dates, item.offsets):
        if indexed_offset < previous:
            problems.append(f"Index offsets decrease at {indexed_offset}")
        previous = indexed_offset
        if indexed_offset not in boundaries:
            problems.append(f"Index offset {indexed_offset} is not a record boundary")
        elif boundaries[indexed_offset] != day:
            problems.append(f"Index day {day} does not match record at {indexed_offset}")
    return problems
