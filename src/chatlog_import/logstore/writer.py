"""Append-only writer for a conversation's log and index files."""

from pathlib import Path
from typing import BinaryIO, Self

from chatlog_import.logging import get_logger
from chatlog_import.logstore.index import LogIndex, check_index
from chatlog_import.logstore.serializer import serialize_message
from chatlog_import.models import MessageRecord

logger = get_logger("logstore.writer")


class ConversationLogWriter:
    """Writes message records for one conversation.

    Files are opened lazily on the first record, so a conversation that yields
    no records leaves nothing on disk. For each record the index entry (if
    any) is appended and flushed before the record itself, and the running
    byte offset is advanced by the serialized size afterwards.
    """

    def __init__(
        self,
        log_path: Path,
        index_path: Path,
        key: str,
        name: str,
        index: LogIndex | None = None,
    ) -> None:
        """Initialize the writer.

        Args:
            log_path: Destination log file
            index_path: Destination index file
            key: Conversation key
            name: Conversation display name, stored in the index header
            index: Shared index state for the run (a fresh one if omitted)
        """
        self._log_path = log_path
        self._index_path = index_path
        self._key = key
        self._name = name
        self._index: LogIndex = index if index is not None else {}
        self._log_file: BinaryIO | None = None
        self._index_file: BinaryIO | None = None
        self.size = 0
        self.messages_written = 0

    @property
    def log_path(self) -> Path:
        return self._log_path

    @property
    def index_path(self) -> Path:
        return self._index_path

    def remove_existing(self) -> None:
        """Delete a previous import's log and index for this conversation."""
        for path in (self._log_path, self._index_path):
            if path.exists():
                path.unlink()
                logger.debug("Removed previous file: path=%s", path)
        self._index.pop(self._key, None)
        self.size = 0

    def _files(self) -> tuple[BinaryIO, BinaryIO]:
        if self._log_file is None or self._index_file is None:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log_file = open(self._log_path, "ab")
            self._index_file = open(self._index_path, "ab")
        return self._log_file, self._index_file

    def write(self, message: MessageRecord) -> None:
        """Append one record and its index entry, if it starts a new day."""
        serialized = serialize_message(message)
        entry = check_index(self._index, message, self._key, self._name, self.size)
        log_file, index_file = self._files()

        if entry is not None:
            index_file.write(entry)
            index_file.flush()
        log_file.write(serialized.data)
        log_file.flush()
        self.size += serialized.size
        self.messages_written += 1

    def close(self) -> None:
        """Close any open file handles."""
        if self._index_file is not None:
            self._index_file.close()
            self._index_file = None
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None

    def __enter__(self) -> Self:
        """Enter context manager."""
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Exit context manager, closing file handles."""
        self.close()
