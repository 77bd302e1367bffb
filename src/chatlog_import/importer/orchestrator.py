"""Drives a character's legacy transcript import, one conversation at a time."""

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

from chatlog_import.config import Config
from chatlog_import.importer.classifier import classify_conversation, is_reserved_directory
from chatlog_import.importer.reconstructor import LineContext, parse_messages
from chatlog_import.importer.settings import find_character_dir, import_settings
from chatlog_import.logging import get_logger
from chatlog_import.logstore.index import LogIndex
from chatlog_import.logstore.paths import LogPaths
from chatlog_import.logstore.serializer import is_storable_time
from chatlog_import.logstore.settings_store import SettingsStore
from chatlog_import.logstore.writer import ConversationLogWriter
from chatlog_import.models import ConversationInfo

logger = get_logger("importer.orchestrator")

ProgressCallback = Callable[[float], None]

# Global flag for stopping between conversations
_shutdown_requested = False


def request_shutdown() -> None:
    """Request that the import stop before the next conversation."""
    global _shutdown_requested
    _shutdown_requested = True


def is_shutdown_requested() -> bool:
    """Check if shutdown has been requested."""
    return _shutdown_requested


def reset_shutdown() -> None:
    """Reset shutdown flag (useful for testing)."""
    global _shutdown_requested
    _shutdown_requested = False


def parse_file_date(filename: str) -> datetime | None:
    """Parse the MM-DD-YYYY date a transcript file is named after.

    Args:
        filename: File name, e.g. "03-01-2019.txt"

    Returns:
        Midnight of that day, or None if the name is not a valid date
    """
    parts = Path(filename).stem.split("-")
    if len(parts) < 3:
        return None
    try:
        month, day, year = (int(part) for part in parts[:3])
        return datetime(year, month, day)
    except ValueError:
        return None


def list_day_files(conversation_dir: Path) -> list[tuple[datetime, Path]]:
    """List a conversation's transcript files in date order.

    Files whose names are not valid dates, or whose day does not fit the
    log's timestamp range, are skipped.
    """
    dated: list[tuple[datetime, Path]] = []
    for path in sorted(conversation_dir.iterdir()):
        if not path.is_file():
            continue
        file_date = parse_file_date(path.name)
        if file_date is None:
            logger.warning("Skipping file with invalid date: path=%s", path)
            continue
        if not (is_storable_time(file_date) and is_storable_time(file_date + timedelta(days=1))):
            logger.warning("Skipping file dated outside the storable range: path=%s", path)
            continue
        dated.append((file_date, path))
    dated.sort(key=lambda item: item[0])
    return dated


def import_conversation(
    conversation_dir: Path,
    info: ConversationInfo,
    own_character: str,
    writer: ConversationLogWriter,
) -> dict[str, int]:
    """Import every transcript file of one conversation through a writer.

    Write errors are not handled here; they abort the conversation.

    Args:
        conversation_dir: Folder holding the conversation's day files
        info: Classification of the folder
        own_character: Character whose logs are imported
        writer: Writer for the conversation's log and index

    Returns:
        Dict with counts: {"files": N, "skipped_files": S, "messages": M}
    """
    result = {"files": 0, "skipped_files": 0, "messages": 0}

    for file_date, path in list_day_files(conversation_dir):
        try:
            content = path.read_bytes().decode("utf-8", errors="replace")
        except OSError:
            logger.warning("Skipping unreadable file: path=%s", path, exc_info=True)
            result["skipped_files"] += 1
            continue

        if not content:
            logger.debug("Skipping empty file: path=%s", path)
            result["skipped_files"] += 1
            continue

        context = LineContext(
            own_character=own_character,
            conversation_name=info.name,
            is_channel=info.is_channel,
            date=file_date,
        )
        for message in parse_messages(content, context):
            if not is_storable_time(message.time):
                logger.warning(
                    "Skipping message with unstorable time: path=%s time=%s", path, message.time
                )
                continue
            writer.write(message)
            result["messages"] += 1
        result["files"] += 1

    return result


def import_character(
    own_character: str,
    config: Config,
    progress: ProgressCallback | None = None,
) -> dict[str, int]:
    """Import a character's legacy settings and transcripts.

    Each conversation's previous log and index are replaced. Progress is
    reported as i / N before the i-th of N folders is processed.

    Args:
        own_character: Character to import
        config: Application configuration
        progress: Optional callback receiving a fraction in [0, 1)

    Returns:
        Dict with aggregate counts:
        {"conversations": C, "files": F, "skipped_files": S, "messages": M}
    """
    reset_shutdown()
    totals = {"conversations": 0, "files": 0, "skipped_files": 0, "messages": 0}

    character_dir = find_character_dir(config.source.roaming_dir, own_character)
    if character_dir is None:
        logger.info("Nothing to import: character=%s", own_character)
        return totals

    paths = LogPaths(config.storage.data_dir)
    import_settings(character_dir, SettingsStore(paths.settings_dir(own_character)))

    logger.info("Starting import: character=%s source=%s", own_character, character_dir)

    subdirs = sorted(character_dir.iterdir())
    index: LogIndex = {}
    seen_keys: dict[str, str] = {}

    for position, subdir in enumerate(subdirs):
        if is_shutdown_requested():
            logger.info("Import stopped before folder: name=%s", subdir.name)
            break

        if progress is not None:
            progress(position / len(subdirs))

        if is_reserved_directory(subdir.name) or not subdir.is_dir():
            continue

        info = classify_conversation(subdir.name)
        if info.key in seen_keys:
            logger.warning(
                "Conversation key collision: key=%s first=%s second=%s",
                info.key,
                seen_keys[info.key],
                subdir.name,
            )
        seen_keys[info.key] = subdir.name

        with ConversationLogWriter(
            paths.log_path(own_character, info.key),
            paths.index_path(own_character, info.key),
            info.key,
            info.name,
            index,
        ) as writer:
            writer.remove_existing()
            result = import_conversation(subdir, info, own_character, writer)

        totals["conversations"] += 1
        totals["files"] += result["files"]
        totals["skipped_files"] += result["skipped_files"]
        totals["messages"] += result["messages"]

        logger.info(
            "Imported conversation: key=%s files=%d messages=%d bytes=%d",
            info.key,
            result["files"],
            result["messages"],
            writer.size,
        )

    logger.info(
        "Import complete: character=%s conversations=%d files=%d messages=%d",
        own_character,
        totals["conversations"],
        totals["files"],
        totals["messages"],
    )
    return totals
