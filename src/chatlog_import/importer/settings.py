"""Import of the legacy client's XML settings.

Character settings live in <roaming>/<character>/Global/!settings.xml (or the
!Defaults folder when the character has none). Account settings are read from
whichever of the per-install user.config files or <roaming>/!preferences.xml
was modified last.
"""

import codecs
import xml.etree.ElementTree as ET
from pathlib import Path

from chatlog_import.config import Config
from chatlog_import.logging import get_logger
from chatlog_import.logstore.settings_store import SettingsStore
from chatlog_import.models import ChatSettings, GeneralSettings, PinnedConversations

logger = get_logger("importer.settings")

DEFAULTS_DIRNAME = "!Defaults"
SETTINGS_FILE = Path("Global") / "!settings.xml"
PREFERENCES_FILE = "!preferences.xml"
USER_CONFIG_FILE = "user.config"


def find_character_dir(roaming_dir: Path | None, character: str) -> Path | None:
    """Locate a character's legacy data folder, falling back to !Defaults."""
    if roaming_dir is None:
        return None
    for candidate in (roaming_dir / character, roaming_dir / DEFAULTS_DIRNAME):
        if candidate.is_dir():
            return candidate
    return None


def can_import_character(config: Config, character: str) -> bool:
    return find_character_dir(config.source.roaming_dir, character) is not None


def can_import_general(config: Config) -> bool:
    local_dir = config.source.local_dir
    return local_dir is not None and local_dir.is_dir()


def _parse_xml(path: Path) -> ET.Element | None:
    data = path.read_bytes().removeprefix(codecs.BOM_UTF8)
    try:
        return ET.fromstring(data)
    except ET.ParseError:
        logger.warning("Malformed settings file: path=%s", path, exc_info=True)
        return None


def _find_text(root: ET.Element, tag: str) -> str | None:
    element = next(root.iter(tag), None)
    if element is None or element.text is None:
        return None
    return element.text


def parse_chat_settings(root: ET.Element) -> ChatSettings:
    """Map legacy settings elements onto ChatSettings."""
    settings = ChatSettings()

    if _find_text(root, "AllowColors") == "false":
        settings.disallowed_tags.append("color")
    if _find_text(root, "AllowIcons") == "false":
        settings.disallowed_tags.extend(["icon", "eicon"])
    if _find_text(root, "AllowSound") == "false":
        settings.play_sound = False
    if _find_text(root, "CheckForOwnName") == "false":
        settings.highlight = False

    idle_time = _find_text(root, "AutoIdleTime")
    if _find_text(root, "AllowAutoIdle") == "true" and idle_time is not None:
        try:
            settings.idle_timer = int(idle_time)
        except ValueError:
            logger.warning("Ignoring invalid AutoIdleTime: value=%r", idle_time)

    highlight_words = _find_text(root, "GlobalNotifyTerms")
    if highlight_words is not None:
        settings.highlight_words = [w.strip() for w in highlight_words.split(",") if w.strip()]

    if _find_text(root, "ShowNotificationsGlobal") == "false":
        settings.notifications = False
    if _find_text(root, "ShowAvatars") == "false":
        settings.show_avatars = False
    if _find_text(root, "PlaySoundEvenWhenTabIsFocused") == "true":
        settings.always_notify = True

    return settings


def parse_pinned(root: ET.Element) -> PinnedConversations:
    """Collect saved channels, without duplicates, in file order."""
    pinned = PinnedConversations()
    saved = next(root.iter("SavedChannels"), None)
    if saved is None:
        return pinned
    for element in saved.iter("channel"):
        if element.text is not None and element.text not in pinned.channels:
            pinned.channels.append(element.text)
    return pinned


def import_settings(character_dir: Path, store: SettingsStore) -> bool:
    """Import a character's settings and pinned channels.

    Args:
        character_dir: Character folder found by find_character_dir
        store: Destination settings store

    Returns:
        True if settings were found and stored
    """
    settings_file = character_dir / SETTINGS_FILE
    if not settings_file.exists():
        logger.info("No settings to import: path=%s", settings_file)
        return False

    root = _parse_xml(settings_file)
    if root is None:
        return False

    store.set("settings", parse_chat_settings(root).to_dict())
    pinned = parse_pinned(root)
    store.set("pinned", pinned.to_dict())

    logger.info(
        "Imported settings: path=%s pinned_channels=%d",
        settings_file,
        len(pinned.channels),
    )
    return True


def _general_candidates(config: Config) -> list[Path]:
    candidates: list[Path] = []
    local_dir = config.source.local_dir
    if local_dir is not None and local_dir.is_dir():
        for install_dir in sorted(local_dir.iterdir()):
            if not install_dir.is_dir():
                continue
            for version_dir in sorted(install_dir.iterdir()):
                candidates.append(version_dir / USER_CONFIG_FILE)
    roaming_dir = config.source.roaming_dir
    if roaming_dir is not None and roaming_dir.is_dir():
        candidates.append(roaming_dir / PREFERENCES_FILE)
    return [path for path in candidates if path.is_file()]


def _apply_user_config(root: ET.Element, general: GeneralSettings) -> None:
    # <configuration><userSettings><Section><setting name="..."><value>
    try:
        section = root[0][0]
    except IndexError:
        return
    for setting in section.iter("setting"):
        if len(setting) == 0 or setting[0].text is None:
            continue
        name = setting.get("name")
        if name == "UserName":
            general.account = setting[0].text
        elif name == "Host":
            general.host = setting[0].text


def import_general(config: Config, general: GeneralSettings | None = None) -> GeneralSettings:
    """Read account name and host from the most recent legacy config file.

    Args:
        config: Application configuration
        general: Settings to update (defaults are used if omitted)

    Returns:
        The updated GeneralSettings
    """
    if general is None:
        general = GeneralSettings()

    candidates = _general_candidates(config)
    if not candidates:
        logger.info("No general settings to import")
        return general

    latest = max(candidates, key=lambda path: path.stat().st_mtime)
    root = _parse_xml(latest)
    if root is None:
        return general

    if latest.suffix == ".xml":
        account = _find_text(root, "Username")
        if account is not None:
            general.account = account
        host = _find_text(root, "Host")
        if host is not None:
            general.host = host
    else:
        _apply_user_config(root, general)

    logger.info("Imported general settings: path=%s account=%s", latest, general.account)
    return general
