"""Library configuration: reads env vars and exposes a singleton.

Loads log verbosity, the unmapped-interaction policy, event locking,
delete-on-cancel, the missing-action policy and the control glyphs from
TGPAGES_* environment variables (with local .env support). Every setting
can also be changed at runtime through the setters below.
The module-level `config` instance is imported by nearly every other module.

Key class: Config (singleton instantiated as `config`).
"""

import logging
import os
from enum import Enum, IntEnum
from pathlib import Path

from dotenv import load_dotenv

from .callback_data import validate_glyph

logger = logging.getLogger(__name__)


class LogLevel(IntEnum):
    """Verbosity of the tgpages logger."""

    NONE = 0  # disabled
    LEVEL_1 = 1  # errors
    LEVEL_2 = 2  # + warnings
    LEVEL_3 = 3  # + info
    LEVEL_4 = 4  # + debug

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS = {
    LogLevel.NONE: logging.CRITICAL + 10,
    LogLevel.LEVEL_1: logging.ERROR,
    LogLevel.LEVEL_2: logging.WARNING,
    LogLevel.LEVEL_3: logging.INFO,
    LogLevel.LEVEL_4: logging.DEBUG,
}


class Emote(Enum):
    """Library controls whose glyph is configurable."""

    NEXT = "next"
    PREVIOUS = "previous"
    ACCEPT = "accept"
    CANCEL = "cancel"
    SKIP_FORWARD = "skip_forward"
    SKIP_BACKWARD = "skip_backward"
    GOTO_FIRST = "goto_first"
    GOTO_LAST = "goto_last"


DEFAULT_EMOTES: dict[Emote, str] = {
    Emote.NEXT: "▶",
    Emote.PREVIOUS: "◀",
    Emote.ACCEPT: "✅",
    Emote.CANCEL: "❎",
    Emote.SKIP_FORWARD: "⏩",
    Emote.SKIP_BACKWARD: "⏪",
    Emote.GOTO_FIRST: "⏮",
    Emote.GOTO_LAST: "⏭",
}


class UnmappedPolicy(str, Enum):
    """What to do with a button press on a message nobody listens to."""

    STRIP = "strip"  # remove the inline keyboard
    DELETE = "delete"  # delete the message
    IGNORE = "ignore"  # only acknowledge the query


class MissingActionPolicy(str, Enum):
    """What a button controller does with a glyph that has no action."""

    IGNORE = "ignore"
    RAISE = "raise"


_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


def parse_log_level(raw: str | int | LogLevel) -> LogLevel:
    """Accept a LogLevel, its name, its number, or a logging level name."""
    if isinstance(raw, LogLevel):
        return raw
    if isinstance(raw, int):
        return LogLevel(raw)
    text = raw.strip().upper()
    if text.isdigit():
        return LogLevel(int(text))
    if text in LogLevel.__members__:
        return LogLevel[text]
    aliases = {
        "ERROR": LogLevel.LEVEL_1,
        "WARNING": LogLevel.LEVEL_2,
        "INFO": LogLevel.LEVEL_3,
        "DEBUG": LogLevel.LEVEL_4,
    }
    if text in aliases:
        return aliases[text]
    raise ValueError(
        f"Unknown log level {raw!r}. Expected NONE, LEVEL_1..LEVEL_4 or 0-4."
    )


class Config:
    """Library configuration loaded from environment variables."""

    def __init__(self) -> None:
        # Only a local .env is consulted; a library has no config dir of its own
        local_env = Path(".env")
        if local_env.is_file():
            load_dotenv(local_env)
            logger.debug("Loaded env from %s", local_env.resolve())

        self.log_level = parse_log_level(os.getenv("TGPAGES_LOG_LEVEL", "LEVEL_1"))

        policy = os.getenv("TGPAGES_UNMAPPED_POLICY", "strip").strip().lower()
        try:
            self.unmapped_policy = UnmappedPolicy(policy)
        except ValueError as e:
            raise ValueError(
                f"TGPAGES_UNMAPPED_POLICY must be one of strip, delete, ignore: {e}"
            ) from e

        missing = os.getenv("TGPAGES_MISSING_ACTION", "ignore").strip().lower()
        try:
            self.missing_action = MissingActionPolicy(missing)
        except ValueError as e:
            raise ValueError(
                f"TGPAGES_MISSING_ACTION must be ignore or raise: {e}"
            ) from e

        # Serialized mode: at most one callback per message at a time
        self.event_locking = _env_bool("TGPAGES_EVENT_LOCKING", True)
        self.delete_on_cancel = _env_bool("TGPAGES_DELETE_ON_CANCEL", False)

        self._emotes: dict[Emote, str] = dict(DEFAULT_EMOTES)
        for emote in Emote:
            override = os.getenv(f"TGPAGES_EMOJI_{emote.name}", "").strip()
            if override:
                self._emotes[emote] = validate_glyph(override)

        logger.debug(
            "Config initialized: log_level=%s, unmapped=%s, locking=%s, "
            "delete_on_cancel=%s",
            self.log_level.name,
            self.unmapped_policy.value,
            self.event_locking,
            self.delete_on_cancel,
        )

    def get_emote(self, emote: Emote) -> str:
        """Return the glyph currently bound to a library control."""
        return self._emotes[emote]

    def set_emote(self, emote: Emote, glyph: str) -> None:
        """Rebind a library control to another glyph."""
        self._emotes[emote] = validate_glyph(glyph)
        logger.info("Emote %s set to %r", emote.name, glyph)

    def emote_for(self, glyph: str) -> Emote | None:
        """Return the library control a glyph stands for, if any."""
        for emote, value in self._emotes.items():
            if value == glyph:
                return emote
        return None

    @property
    def emotes(self) -> dict[Emote, str]:
        return dict(self._emotes)

    def set_log_level(self, level: str | int | LogLevel) -> None:
        """Change verbosity and apply it to the tgpages logger immediately."""
        from .log import apply_log_level

        self.log_level = parse_log_level(level)
        apply_log_level(self.log_level)


config = Config()
