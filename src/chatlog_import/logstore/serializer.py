"""Binary encoding of message records in the conversation log.

Record layout (little-endian):

    uint32  time        seconds since epoch, wall clock encoded as UTC
    uint8   type        MessageType value
    uint8   sender_len  byte length of the sender name
    bytes   sender      UTF-8
    uint32  text_len    byte length of the text
    bytes   text        UTF-8
    uint32  length      byte length of everything above

The trailing length lets a reader walk the log backwards from any record
boundary.
"""

import calendar
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta

from chatlog_import.models import MessageRecord, MessageType, Sender

_HEAD = struct.Struct("<IBB")
_LENGTH = struct.Struct("<I")

EPOCH = datetime(1970, 1, 1)
MAX_EPOCH_SECONDS = 0xFFFFFFFF
LATEST_TIME = EPOCH + timedelta(seconds=MAX_EPOCH_SECONDS)


@dataclass(frozen=True)
class SerializedMessage:
    data: bytes
    size: int


def to_epoch_seconds(time: datetime) -> int:
    """Encode a naive wall-clock time as seconds since epoch."""
    return calendar.timegm(time.timetuple())


def from_epoch_seconds(seconds: int) -> datetime:
    return EPOCH + timedelta(seconds=seconds)


def is_storable_time(time: datetime) -> bool:
    """Whether a time fits the record's uint32 timestamp."""
    return EPOCH <= time <= LATEST_TIME


def serialize_message(message: MessageRecord) -> SerializedMessage:
    """Serialize a record to its on-disk bytes.

    Raises:
        ValueError: If the time is outside the storable range, or the sender
            name does not fit its one-byte length field
    """
    seconds = to_epoch_seconds(message.time)
    if not 0 <= seconds <= MAX_EPOCH_SECONDS:
        raise ValueError(f"Time out of range: {message.time}")
    sender = message.sender.name.encode("utf-8")
    if len(sender) > 0xFF:
        raise ValueError(f"Sender name too long: {len(sender)} bytes")
    text = message.text.encode("utf-8")

    body = b"".join(
        (
            _HEAD.pack(seconds, int(message.type), len(sender)),
            sender,
            _LENGTH.pack(len(text)),
            text,
        )
    )
    data = body + _LENGTH.pack(len(body))
    return SerializedMessage(data=data, size=len(data))


def deserialize_message(buffer: bytes, offset: int = 0) -> tuple[MessageRecord, int]:
    """Decode the record starting at offset.

    Returns:
        Tuple of (record, offset of the next record)

    Raises:
        ValueError: If the buffer ends inside the record
    """
    try:
        seconds, type_value, sender_len = _HEAD.unpack_from(buffer, offset)
        pos = offset + _HEAD.size
        sender = bytes(buffer[pos:pos + sender_len]).decode("utf-8")
        pos += sender_len
        (text_len,) = _LENGTH.unpack_from(buffer, pos)
        pos += _LENGTH.size
        text = bytes(buffer[pos:pos + text_len]).decode("utf-8")
        pos += text_len
        (body_len,) = _LENGTH.unpack_from(buffer, pos)
    except struct.error as e:
        raise ValueError(f"Truncated record at offset {offset}") from e

    if body_len != pos - offset:
        raise ValueError(f"Corrupt record at offset {offset}")

    record = MessageRecord(
        type=MessageType(type_value),
        sender=Sender(sender),
        text=text,
        time=from_epoch_seconds(seconds),
    )
    return record, pos + _LENGTH.size
