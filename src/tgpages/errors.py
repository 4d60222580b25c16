"""Exception hierarchy for tgpages.

Configuration and state errors are raised synchronously, before any
Telegram request is made. Remote errors wrap the TelegramError that caused
them. Errors raised inside a registered callback never leave the router.
"""


class PagesError(Exception):
    """Base class for every error raised by tgpages."""


# ── Configuration errors ─────────────────────────────────────────────────


class InvalidPageError(PagesError, ValueError):
    """Page content has the wrong type or violates its size bounds."""


class InvalidEmoteError(PagesError, ValueError):
    """A glyph is empty or does not fit in Telegram callback data."""


class TooManyButtonsError(PagesError):
    """More controls were requested than a single message can carry."""

    def __init__(self, requested: int, limit: int) -> None:
        super().__init__(
            f"{requested} buttons requested, a message holds at most {limit}"
        )
        self.requested = requested
        self.limit = limit


class InvalidOptionsError(PagesError, ValueError):
    """Option values are out of range or conflict with each other."""


class InvalidHandlerError(PagesError):
    """The object passed to activate() cannot deliver Telegram updates."""


class AlreadyActivatedError(PagesError):
    """activate() was called while a router is already installed."""


# ── State errors ─────────────────────────────────────────────────────────


class InvalidStateError(PagesError):
    """Operation requires an active router (see tgpages.activate)."""


class EmptyPageCollectionError(PagesError):
    """At least one page, category or button is required."""


# ── Remote errors ────────────────────────────────────────────────────────


class TargetUnavailableError(PagesError):
    """The target message or chat no longer exists or cannot be accessed."""

    def __init__(self, chat_id: int, message_id: int, reason: str) -> None:
        super().__init__(f"Message {message_id} in chat {chat_id}: {reason}")
        self.chat_id = chat_id
        self.message_id = message_id
        self.reason = reason


# ── Callback errors ──────────────────────────────────────────────────────


class MissingActionError(PagesError, LookupError):
    """A pressed glyph has no action bound (only with MissingActionPolicy.RAISE)."""
