"""Tests for legacy settings import."""

import os
from pathlib import Path

import pytest

from chatlog_import.config import Config, SourceConfig
from chatlog_import.importer.settings import (
    can_import_character,
    can_import_general,
    find_character_dir,
    import_general,
    import_settings,
)
from chatlog_import.logstore.settings_store import SettingsStore
from chatlog_import.models import GeneralSettings

SETTINGS_XML = """<?xml version="1.0" encoding="utf-8"?>
<settings>
  <AllowColors>false</AllowColors>
  <AllowIcons>false</AllowIcons>
  <AllowSound>false</AllowSound>
  <CheckForOwnName>true</CheckForOwnName>
  <AllowAutoIdle>true</AllowAutoIdle>
  <AutoIdleTime>15</AutoIdleTime>
  <GlobalNotifyTerms>dragon, knight,, </GlobalNotifyTerms>
  <ShowNotificationsGlobal>false</ShowNotificationsGlobal>
  <ShowAvatars>true</ShowAvatars>
  <PlaySoundEvenWhenTabIsFocused>true</PlaySoundEvenWhenTabIsFocused>
  <SavedChannels>
    <channel>Frontpage</channel>
    <channel>ADH-1234</channel>
    <channel>Frontpage</channel>
  </SavedChannels>
</settings>
"""

USER_CONFIG = """<?xml version="1.0" encoding="utf-8"?>
<configuration>
  <userSettings>
    <slimCat.Properties.Settings>
      <setting name="UserName" serializeAs="String"><value>myaccount</value></setting>
      <setting name="Host" serializeAs="String"><value>wss://chat.example.net</value></setting>
    </slimCat.Properties.Settings>
  </userSettings>
</configuration>
"""

PREFERENCES_XML = """<?xml version="1.0" encoding="utf-8"?>
<Preferences>
  <Username>otheraccount</Username>
  <Host>wss://other.example.net</Host>
</Preferences>
"""


@pytest.fixture
def character_dir(tmp_path: Path) -> Path:
    """Create a character folder with a BOM-prefixed settings file."""
    directory = tmp_path / "roaming" / "Aria"
    (directory / "Global").mkdir(parents=True)
    (directory / "Global" / "!settings.xml").write_bytes(
        b"\xef\xbb\xbf" + SETTINGS_XML.encode("utf-8")
    )
    return directory


@pytest.fixture
def store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "data" / "Aria" / "settings")


class TestFindCharacterDir:
    """Tests for character folder lookup."""

    def test_character_folder(self, character_dir: Path) -> None:
        assert find_character_dir(character_dir.parent, "Aria") == character_dir

    def test_defaults_fallback(self, character_dir: Path) -> None:
        """Unknown characters should fall back to !Defaults."""
        defaults = character_dir.parent / "!Defaults"
        defaults.mkdir()
        assert find_character_dir(character_dir.parent, "Other") == defaults

    def test_missing(self, character_dir: Path) -> None:
        assert find_character_dir(character_dir.parent, "Other") is None
        assert find_character_dir(None, "Aria") is None

    def test_can_import_character(self, character_dir: Path) -> None:
        config = Config(source=SourceConfig(roaming_dir=character_dir.parent))
        assert can_import_character(config, "Aria")
        assert not can_import_character(config, "Other")


class TestImportSettings:
    """Tests for import_settings function."""

    def test_imports_settings(self, character_dir: Path, store: SettingsStore) -> None:
        """Legacy flags should be mapped onto the stored settings."""
        assert import_settings(character_dir, store) is True

        assert store.get("settings") == {
            "disallowedTags": ["color", "icon", "eicon"],
            "playSound": False,
            "highlight": True,
            "idleTimer": 15,
            "highlightWords": ["dragon", "knight"],
            "notifications": False,
            "showAvatars": True,
            "alwaysNotify": True,
        }

    def test_imports_pinned_channels(self, character_dir: Path, store: SettingsStore) -> None:
        """Saved channels should be pinned once each, in order."""
        import_settings(character_dir, store)

        assert store.get("pinned") == {"channels": ["Frontpage", "ADH-1234"], "private": []}

    def test_idle_timer_requires_auto_idle(self, tmp_path: Path, store: SettingsStore) -> None:
        """AutoIdleTime should be ignored unless AllowAutoIdle is true."""
        directory = tmp_path / "Bob"
        (directory / "Global").mkdir(parents=True)
        (directory / "Global" / "!settings.xml").write_text(
            "<settings><AllowAutoIdle>false</AllowAutoIdle><AutoIdleTime>9</AutoIdleTime></settings>"
        )

        import_settings(directory, store)

        assert store.get("settings")["idleTimer"] == 0
        assert store.get("pinned") == {"channels": [], "private": []}

    def test_missing_settings_file(self, tmp_path: Path, store: SettingsStore) -> None:
        """A character without settings should store nothing."""
        assert import_settings(tmp_path, store) is False
        assert store.get("settings") is None

    def test_malformed_settings_file(self, tmp_path: Path, store: SettingsStore) -> None:
        """Unparsable XML should be skipped."""
        (tmp_path / "Global").mkdir()
        (tmp_path / "Global" / "!settings.xml").write_text("<settings><oops></settings>")

        assert import_settings(tmp_path, store) is False
        assert store.get("settings") is None


class TestImportGeneral:
    """Tests for import_general function."""

    @pytest.fixture
    def config(self, tmp_path: Path) -> Config:
        local = tmp_path / "local"
        version_dir = local / "slimCat.exe_Url_abc" / "5.0.0.0"
        version_dir.mkdir(parents=True)
        (version_dir / "user.config").write_text(USER_CONFIG)
        roaming = tmp_path / "roaming"
        roaming.mkdir()
        return Config(source=SourceConfig(roaming_dir=roaming, local_dir=local))

    def test_reads_user_config(self, config: Config) -> None:
        """user.config settings should be read when it is the only file."""
        general = import_general(config)
        assert general == GeneralSettings(account="myaccount", host="wss://chat.example.net")

    def test_prefers_most_recent_file(self, config: Config) -> None:
        """The most recently modified candidate should win."""
        assert config.source.roaming_dir is not None
        preferences = config.source.roaming_dir / "!preferences.xml"
        preferences.write_text(PREFERENCES_XML)
        user_config = next(config.source.local_dir.glob("*/*/user.config"))
        os.utime(user_config, (1_000_000, 1_000_000))
        os.utime(preferences, (2_000_000, 2_000_000))

        general = import_general(config)

        assert general.account == "otheraccount"
        assert general.host == "wss://other.example.net"

    def test_nothing_to_import(self) -> None:
        """Missing directories should leave defaults untouched."""
        general = import_general(Config(source=SourceConfig()))
        assert general == GeneralSettings()

    def test_can_import_general(self, config: Config) -> None:
        assert can_import_general(config)
        assert not can_import_general(Config(source=SourceConfig()))
