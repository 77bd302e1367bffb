"""Canonical data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum

# Longest message text kept from a transcript line
MAX_TEXT_LENGTH = 50000


class MessageType(IntEnum):
    """Record kinds, numbered as they are stored in the log file."""

    MESSAGE = 0
    ACTION = 1
    ROLL = 3


@dataclass(frozen=True)
class Sender:
    name: str


@dataclass(frozen=True)
class MessageRecord:
    """A single chat message reconstructed from a transcript line."""

    type: MessageType
    sender: Sender
    text: str
    time: datetime  # Wall-clock time, naive


@dataclass(frozen=True)
class ConversationInfo:
    """Where a source subdirectory's messages end up."""

    key: str  # "#code" for channels, lower-cased name for private chats
    name: str  # Display name
    is_channel: bool


@dataclass
class ChatSettings:
    """Per-character client preferences carried over from the legacy client."""

    disallowed_tags: list[str] = field(default_factory=list)
    play_sound: bool = True
    highlight: bool = True
    idle_timer: int = 0
    highlight_words: list[str] = field(default_factory=list)
    notifications: bool = True
    show_avatars: bool = True
    always_notify: bool = False

    def to_dict(self) -> dict:
        return {
            "disallowedTags": self.disallowed_tags,
            "playSound": self.play_sound,
            "highlight": self.highlight,
            "idleTimer": self.idle_timer,
            "highlightWords": self.highlight_words,
            "notifications": self.notifications,
            "showAvatars": self.show_avatars,
            "alwaysNotify": self.always_notify,
        }


@dataclass
class PinnedConversations:
    channels: list[str] = field(default_factory=list)
    private: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"channels": self.channels, "private": self.private}


@dataclass
class GeneralSettings:
    """Account-level settings shared by all characters."""

    account: str = ""
    host: str = "wss://chat.f-list.net/chat2"
