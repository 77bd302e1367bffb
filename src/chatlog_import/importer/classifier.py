"""Maps legacy transcript folder names to conversation keys."""

from chatlog_import.models import ConversationInfo

# Folders in a character directory that never hold a conversation
RESERVED_DIRECTORIES = frozenset({"Global", "!Notifications"})

# Official channels are saved under their bare title instead of "Title (code)"
KNOWN_OFFICIAL_CHANNELS = frozenset(
    {
        "Canon Characters",
        "Monster's Lair",
        "German IC",
        "Humans/Humanoids",
        "Warhammer General",
        "Love and Affection",
        "Transformation",
        "Hyper Endowed",
        "Force/Non-Con",
        "Diapers/Infantilism",
        "Avians",
        "Politics",
        "Lesbians",
        "Superheroes",
        "Footplay",
        "Sadism/Masochism",
        "German Politics",
        "Para/Multi-Para RP",
        "Micro/Macro",
        "Ferals / Bestiality",
        "Gamers",
        "Gay Males",
        "Story Driven LFRP",
        "Femdom",
        "German OOC",
        "World of Warcraft",
        "Ageplay",
        "German Furry",
        "Scat Play",
        "Hermaphrodites",
        "RP Dark City",
        "All in the Family",
        "Inflation",
        "Development",
        "Fantasy",
        "Frontpage",
        "Pokefurs",
        "Medical Play",
        "Domination/Submission",
        "Latex",
        "Fat and Pudgy",
        "Muscle Bound",
        "Furries",
        "RP Bar",
        "The Slob Den",
        "Artists / Writers",
        "Mind Control",
        "Ass Play",
        "Sex Driven LFRP",
        "Gay Furry Males",
        "Vore",
        "Non-Sexual RP",
        "Equestria ",
        "Sci-fi",
        "Watersports",
        "Straight Roleplay",
        "Gore",
        "Cuntboys",
        "Femboy",
        "Bondage",
        "Cum Lovers",
        "Transgender",
        "Pregnancy and Impregnation",
        "Canon Characters OOC",
        "Dragons",
        "Helpdesk",
    }
)


def is_reserved_directory(name: str) -> bool:
    return name in RESERVED_DIRECTORIES


def classify_conversation(dirname: str) -> ConversationInfo:
    """Classify a transcript folder as a channel or private conversation.

    - "Display Name (code)" is a private-room channel keyed "#code".
    - A known official channel title is keyed "#title".
    - Anything else is a private conversation keyed by the name.

    Keys are lower-cased.

    Args:
        dirname: Folder name under the character directory

    Returns:
        ConversationInfo with key, display name and channel flag
    """
    marker = dirname.find("(")
    if marker != -1:
        code = dirname[marker + 1:]
        if code.endswith(")"):
            code = code[:-1]
        return ConversationInfo(
            key=f"#{code}".lower(),
            name=dirname[:marker].rstrip(" "),
            is_channel=True,
        )

    if dirname in KNOWN_OFFICIAL_CHANNELS:
        return ConversationInfo(key=f"#{dirname}".lower(), name=dirname, is_channel=True)

    return ConversationInfo(key=dirname.lower(), name=dirname, is_channel=False)
