"""Builds message records from logical transcript lines.

A logical line looks like one of:

    [09:05 PM] Kara: Hello there
    [09:05 PM] Kara waves.
    [09:05 PM] [user]Kara[/user] rolls 1d20: 14

The legacy client wrote "AM" times twelve hours ahead, so an AM hour is
shifted back by twelve and anything else is used as written.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta

from chatlog_import.importer.tokenizer import iter_logical_lines
from chatlog_import.models import MAX_TEXT_LENGTH, MessageRecord, MessageType, Sender

SENDER_PATTERN = re.compile(r"([A-Za-z0-9][A-Za-z0-9 \-_]{0,18}[A-Za-z0-9\-_])\b", re.ASCII)
ACTION_PATTERN = re.compile(r"/me\b", re.IGNORECASE)

# Characters after the header searched for a sender name
SENDER_LOOKAHEAD = 21
# Opening "[user]" tag of a roll, and the gap between the sender and the text
ROLL_TAG_LENGTH = 6
ROLL_SEPARATOR_LENGTH = 6
MAX_ROLL_SENDER_LENGTH = 20
ACTION_PREFIX_LENGTH = 3


@dataclass(frozen=True)
class LineContext:
    """What the reconstructor needs to know about the file being parsed."""

    own_character: str
    conversation_name: str
    is_channel: bool
    date: datetime  # Midnight of the file's calendar day


def is_action(text: str) -> bool:
    return ACTION_PATTERN.match(text) is not None


def parse_clock(time: str) -> tuple[int, int] | None:
    """Parse the bracketed clock field into (hour, minute).

    Returns:
        Hour and minute, or None if either is not a number
    """
    try:
        hour = int(time[0:2])
        minute = int(time[3:5])
    except ValueError:
        return None
    if time.endswith("AM"):
        hour -= 12
    return hour, minute


def _detect_sender(line: str, index: int, context: LineContext) -> str:
    own = context.own_character
    if own and line.startswith(own, index):
        return own
    other = context.conversation_name
    if not context.is_channel and other and line.startswith(other, index):
        return other
    matched = SENDER_PATTERN.search(line, index, index + SENDER_LOOKAHEAD)
    return matched.group(1) if matched is not None else ""


def create_message(line: str, context: LineContext) -> MessageRecord | None:
    """Reconstruct one record from a logical line.

    Args:
        line: Logical line starting with "[time]"
        context: File-level context

    Returns:
        MessageRecord, or None if the line has no usable time
    """
    close = line.find("]")
    if close == -1:
        return None
    clock = parse_clock(line[1:close])
    if clock is None:
        return None
    hour, minute = clock

    index = close + 1
    if line.startswith(" ", index):
        index += 1

    if line.startswith("[", index):
        message_type = MessageType.ROLL
        index += ROLL_TAG_LENGTH
        end = line.find("[", index)
        if end == -1 or end - index > MAX_ROLL_SENDER_LENGTH:
            end = index + MAX_ROLL_SENDER_LENGTH
        sender = line[index:end]
        text = line[end + ROLL_SEPARATOR_LENGTH:]
    else:
        message_type = MessageType.MESSAGE
        sender = _detect_sender(line, index, context)
        index += len(sender)
        if line.startswith(":", index):
            index += 1
            if line.startswith(" ", index):
                index += 1
            if is_action(line[index:]):
                message_type = MessageType.ACTION
                index += ACTION_PREFIX_LENGTH
        else:
            message_type = MessageType.ACTION
        text = line[index:]

    return MessageRecord(
        type=message_type,
        sender=Sender(sender),
        text=text[:MAX_TEXT_LENGTH],
        time=context.date + timedelta(minutes=hour * 60 + minute),
    )


def parse_messages(content: str, context: LineContext) -> Iterator[MessageRecord]:
    """Lazily reconstruct every record in one transcript file.

    Lines without a usable time are skipped.
    """
    for line in iter_logical_lines(content):
        message = create_message(line, context)
        if message is not None:
            yield message
