"""Capability interface between tgpages and the Telegram Bot API.

Controllers never talk to ``telegram.Bot`` directly; they go through a
``MessageGateway``:
  - render: edit a message to show a Page (MarkdownV2, plain-text fallback)
  - set_markup: replace or remove the inline keyboard
  - add_reactions / clear_reactions: bot reactions on the message
  - delete: delete the message
  - acknowledge: answer a callback query (Telegram's deferred ack)

``TelegramGateway`` implements it on top of a PTB ``Bot``. Errors meaning
the message or chat is gone become ``TargetUnavailableError``; "message is
not modified" counts as success; ``RetryAfter`` is always re-raised.
"""

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from telegram import (
    Bot,
    CallbackQuery,
    InlineKeyboardMarkup,
    LinkPreviewOptions,
    ReactionTypeEmoji,
)
from telegram.error import BadRequest, Forbidden, RetryAfter, TelegramError

from .errors import TargetUnavailableError
from .markdown_v2 import convert_markdown
from .models import MessageRef, Page

logger = logging.getLogger(__name__)

# Disable link previews in all messages to reduce visual noise
NO_LINK_PREVIEW = LinkPreviewOptions(is_disabled=True)

# Lower-cased BadRequest fragments meaning the target no longer exists
_GONE_MARKERS = (
    "message to edit not found",
    "message to delete not found",
    "message not found",
    "message_id_invalid",
    "chat not found",
    "message can't be edited",
)


def _is_not_modified(exc: BadRequest) -> bool:
    return "message is not modified" in exc.message.lower()


def _is_gone(exc: TelegramError) -> bool:
    if isinstance(exc, Forbidden):
        return True
    text = exc.message.lower()
    return any(marker in text for marker in _GONE_MARKERS)


def _unavailable(message: MessageRef, exc: TelegramError) -> TargetUnavailableError:
    return TargetUnavailableError(message.chat_id, message.message_id, exc.message)


@runtime_checkable
class MessageGateway(Protocol):
    """What the library needs from the host chat SDK."""

    async def render(
        self,
        message: MessageRef,
        page: Page,
        markup: InlineKeyboardMarkup | None = None,
    ) -> None: ...

    async def set_markup(
        self, message: MessageRef, markup: InlineKeyboardMarkup | None
    ) -> None: ...

    async def add_reactions(
        self, message: MessageRef, glyphs: Sequence[str]
    ) -> None: ...

    async def clear_reactions(self, message: MessageRef) -> None: ...

    async def delete(self, message: MessageRef) -> None: ...

    async def acknowledge(
        self, query: CallbackQuery, text: str | None = None
    ) -> None: ...


class TelegramGateway:
    """MessageGateway backed by a python-telegram-bot ``Bot``."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def render(
        self,
        message: MessageRef,
        page: Page,
        markup: InlineKeyboardMarkup | None = None,
    ) -> None:
        """Edit the message to show a page, falling back to plain text."""
        text = page.to_markdown()
        kwargs = {
            "chat_id": message.chat_id,
            "message_id": message.message_id,
            "reply_markup": markup,
            "link_preview_options": NO_LINK_PREVIEW,
        }
        try:
            await self.bot.edit_message_text(
                text=convert_markdown(text), parse_mode="MarkdownV2", **kwargs
            )
            return
        except RetryAfter:
            raise
        except BadRequest as e:
            if _is_not_modified(e):
                return
            if _is_gone(e):
                raise _unavailable(message, e) from e
            logger.debug("MarkdownV2 edit rejected (%s), retrying as plain text", e)
        except TelegramError as e:
            if _is_gone(e):
                raise _unavailable(message, e) from e
            logger.debug("MarkdownV2 edit failed (%s), retrying as plain text", e)

        try:
            await self.bot.edit_message_text(text=text, **kwargs)
        except RetryAfter:
            raise
        except BadRequest as e:
            if _is_not_modified(e):
                return
            if _is_gone(e):
                raise _unavailable(message, e) from e
            raise
        except TelegramError as e:
            if _is_gone(e):
                raise _unavailable(message, e) from e
            raise

    async def set_markup(
        self, message: MessageRef, markup: InlineKeyboardMarkup | None
    ) -> None:
        """Replace the inline keyboard; None removes it."""
        try:
            await self.bot.edit_message_reply_markup(
                chat_id=message.chat_id,
                message_id=message.message_id,
                reply_markup=markup,
            )
        except RetryAfter:
            raise
        except BadRequest as e:
            if _is_not_modified(e):
                return
            if _is_gone(e):
                raise _unavailable(message, e) from e
            raise
        except TelegramError as e:
            if _is_gone(e):
                raise _unavailable(message, e) from e
            raise

    async def add_reactions(self, message: MessageRef, glyphs: Sequence[str]) -> None:
        """Set the bot's reactions on the message.

        Telegram keeps a bot to a single reaction per message unless the
        chat allows more, so extra glyphs may be rejected by the API.
        """
        if not glyphs:
            return
        try:
            await self.bot.set_message_reaction(
                chat_id=message.chat_id,
                message_id=message.message_id,
                reaction=[ReactionTypeEmoji(g) for g in glyphs],
            )
        except RetryAfter:
            raise
        except TelegramError as e:
            if _is_gone(e):
                raise _unavailable(message, e) from e
            raise

    async def clear_reactions(self, message: MessageRef) -> None:
        try:
            await self.bot.set_message_reaction(
                chat_id=message.chat_id,
                message_id=message.message_id,
                reaction=[],
            )
        except RetryAfter:
            raise
        except TelegramError as e:
            if _is_gone(e):
                raise _unavailable(message, e) from e
            raise

    async def delete(self, message: MessageRef) -> None:
        try:
            await self.bot.delete_message(
                chat_id=message.chat_id, message_id=message.message_id
            )
        except RetryAfter:
            raise
        except TelegramError as e:
            if _is_gone(e):
                raise _unavailable(message, e) from e
            raise

    async def acknowledge(self, query: CallbackQuery, text: str | None = None) -> None:
        """Answer a callback query so the client stops its spinner."""
        await query.answer(text)
