"""Tests for the log record serializer."""

import calendar
import struct
from datetime import datetime

import pytest

from chatlog_import.logstore.serializer import (
    deserialize_message,
    from_epoch_seconds,
    is_storable_time,
    serialize_message,
    to_epoch_seconds,
)
from chatlog_import.models import MessageRecord, MessageType, Sender


@pytest.fixture
def message() -> MessageRecord:
    return MessageRecord(
        type=MessageType.MESSAGE,
        sender=Sender("Kara"),
        text="Hello there",
        time=datetime(2019, 3, 1, 21, 5),
    )


class TestEpochSeconds:
    """Tests for wall-clock time encoding."""

    def test_encodes_as_utc(self) -> None:
        """Naive times should be encoded as if they were UTC."""
        time = datetime(2019, 3, 1, 21, 5)
        assert to_epoch_seconds(time) == calendar.timegm((2019, 3, 1, 21, 5, 0))

    def test_decodes_to_same_wall_clock(self) -> None:
        """Decoding should give back the naive wall-clock time."""
        time = datetime(2019, 3, 1, 21, 5)
        assert from_epoch_seconds(to_epoch_seconds(time)) == time


class TestSerializeMessage:
    """Tests for serialize_message function."""

    def test_layout(self, message: MessageRecord) -> None:
        """Should write time, type, sender, text and trailing length."""
        serialized = serialize_message(message)
        data = serialized.data

        seconds, type_value, sender_len = struct.unpack_from("<IBB", data, 0)
        assert seconds == to_epoch_seconds(message.time)
        assert type_value == 0
        assert sender_len == 4
        assert data[6:10] == b"Kara"
        (text_len,) = struct.unpack_from("<I", data, 10)
        assert text_len == 11
        assert data[14:25] == b"Hello there"
        (body_len,) = struct.unpack_from("<I", data, 25)
        assert body_len == 25

    def test_size_matches_bytes(self, message: MessageRecord) -> None:
        """Reported size should be the exact number of bytes."""
        serialized = serialize_message(message)
        assert serialized.size == len(serialized.data) == 29

    def test_deterministic(self, message: MessageRecord) -> None:
        """Serializing the same record twice should give identical bytes."""
        assert serialize_message(message).data == serialize_message(message).data

    def test_size_counts_encoded_bytes(self) -> None:
        """Multi-byte characters should be counted in bytes."""
        message = MessageRecord(
            type=MessageType.ACTION,
            sender=Sender("Zoë"),
            text=" waves 👋",
            time=datetime(2019, 3, 1),
        )
        serialized = serialize_message(message)
        expected = 6 + len("Zoë".encode()) + 4 + len(" waves 👋".encode()) + 4
        assert serialized.size == expected

    def test_rejects_long_sender(self) -> None:
        """Sender names over 255 bytes should be rejected."""
        message = MessageRecord(
            type=MessageType.MESSAGE,
            sender=Sender("x" * 256),
            text="",
            time=datetime(2019, 3, 1),
        )
        with pytest.raises(ValueError):
            serialize_message(message)

    @pytest.mark.parametrize("time", [datetime(1969, 12, 31, 23, 59), datetime(2106, 2, 8)])
    def test_rejects_time_out_of_range(self, time: datetime) -> None:
        """Times that do not fit the uint32 timestamp should raise ValueError."""
        message = MessageRecord(
            type=MessageType.MESSAGE, sender=Sender("Kara"), text="hi", time=time
        )
        assert is_storable_time(time) is False
        with pytest.raises(ValueError):
            serialize_message(message)

    def test_accepts_range_ends(self) -> None:
        """The epoch and the last representable second should both encode."""
        for time in (datetime(1970, 1, 1), datetime(2106, 2, 7, 6, 28, 15)):
            message = MessageRecord(
                type=MessageType.MESSAGE, sender=Sender("Kara"), text="hi", time=time
            )
            assert is_storable_time(time) is True
            assert deserialize_message(serialize_message(message).data)[0] == message


class TestDeserializeMessage:
    """Tests for deserialize_message function."""

    def test_reads_back_record(self, message: MessageRecord) -> None:
        """Should decode a serialized record and return the next offset."""
        serialized = serialize_message(message)
        decoded, next_offset = deserialize_message(serialized.data)
        assert decoded == message
        assert next_offset == serialized.size

    def test_reads_at_offset(self, message: MessageRecord) -> None:
        """Should decode a record in the middle of a buffer."""
        roll = MessageRecord(
            type=MessageType.ROLL,
            sender=Sender("Bob"),
            text="] rolls 1d20: 14",
            time=datetime(2019, 3, 2, 1, 0),
        )
        first = serialize_message(message)
        buffer = first.data + serialize_message(roll).data
        decoded, _ = deserialize_message(buffer, first.size)
        assert decoded == roll

    def test_truncated_record(self, message: MessageRecord) -> None:
        """A record cut short should raise ValueError."""
        data = serialize_message(message).data
        with pytest.raises(ValueError):
            deserialize_message(data[:-2])

    def test_corrupt_length(self, message: MessageRecord) -> None:
        """A trailer that does not match the body should raise ValueError."""
        data = bytearray(serialize_message(message).data)
        data[-4:] = struct.pack("<I", 3)
        with pytest.raises(ValueError):
            deserialize_message(bytes(data))
