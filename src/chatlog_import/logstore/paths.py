"""Filesystem locations of imported logs and settings."""

from pathlib import Path

INDEX_SUFFIX = ".idx"


class LogPaths:
    """Resolves per-character log, index and settings paths under a data root.

    Layout:
        <data_dir>/<character>/logs/<conversation-key>
        <data_dir>/<character>/logs/<conversation-key>.idx
        <data_dir>/<character>/settings/<setting-key>
    """

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def log_dir(self, character: str) -> Path:
        return self._data_dir / character / "logs"

    def settings_dir(self, character: str) -> Path:
        return self._data_dir / character / "settings"

    def log_path(self, character: str, key: str) -> Path:
        """Path of the append-only message log for a conversation."""
        return self.log_dir(character) / key

    def index_path(self, character: str, key: str) -> Path:
        """Path of the index that accompanies a conversation's log."""
        return self.log_dir(character) / f"{key}{INDEX_SUFFIX}"
