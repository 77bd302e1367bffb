"""JSON-file settings store, one file per setting key."""

import json
from pathlib import Path
from typing import Any

from chatlog_import.logging import get_logger

logger = get_logger("logstore.settings")


class SettingsStore:
    """Persists imported settings under a character's settings directory."""

    def __init__(self, settings_dir: Path) -> None:
        self._settings_dir = settings_dir

    def get(self, key: str) -> Any | None:
        """Load a setting, or None if it was never stored."""
        path = self._settings_dir / key
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable setting, replacing any previous value."""
        self._settings_dir.mkdir(parents=True, exist_ok=True)
        path = self._settings_dir / key
        with open(path, "w", encoding="utf-8") as f:
            json.dump(value, f)
        logger.debug("Stored setting: key=%s path=%s", key, path)
