"""Shared fixtures for tgpages unit tests.

Provides a mocked gateway, an activated router, and factories for Telegram
users, messages, callback-query updates and reaction updates.
"""

import copy
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram import (
    CallbackQuery,
    Chat,
    Message,
    MessageReactionUpdated,
    ReactionTypeEmoji,
    Update,
    User,
)

from tgpages.config import config
from tgpages.gateway import TelegramGateway
from tgpages.log import apply_log_level
from tgpages.models import EventKind, InteractionContext, MessageRef
from tgpages.pages import reset_all
from tgpages.router import InteractionRouter, activate, deactivate

CHAT_ID = 100
GROUP_CHAT_ID = -1001234567890


@pytest.fixture(autouse=True)
def _isolate_state():
    """Fresh registry, scheduler, router and config for every test."""
    saved = copy.deepcopy(config.__dict__)
    reset_all()
    deactivate()
    yield
    reset_all()
    deactivate()
    config.__dict__.clear()
    config.__dict__.update(saved)
    apply_log_level(config.log_level)


@pytest.fixture
def gateway() -> AsyncMock:
    return AsyncMock(spec=TelegramGateway)


@pytest.fixture
def application() -> MagicMock:
    return MagicMock()


@pytest.fixture
def router(application, gateway) -> InteractionRouter:
    return activate(application, gateway=gateway)


@pytest.fixture
def make_user():
    """Factory: build a telegram.User."""

    def _make(user_id: int = 1, *, is_bot: bool = False) -> User:
        return User(id=user_id, first_name=f"user{user_id}", is_bot=is_bot)

    return _make


@pytest.fixture
def message_ref() -> MessageRef:
    return MessageRef(chat_id=CHAT_ID, message_id=42)


@pytest.fixture
def make_message():
    """Factory: build a telegram.Message in a private or group chat."""

    def _make(message_id: int = 42, *, group: bool = False) -> Message:
        chat = (
            Chat(id=GROUP_CHAT_ID, type=Chat.SUPERGROUP)
            if group
            else Chat(id=CHAT_ID, type=Chat.PRIVATE)
        )
        return Message(message_id=message_id, date=datetime.now(UTC), chat=chat)

    return _make


@pytest.fixture
def make_callback_update(make_message, make_user):
    """Factory: build an Update carrying a callback query."""

    def _make(
        data: str,
        *,
        message: Message | None = None,
        user: User | None = None,
        with_message: bool = True,
    ) -> Update:
        query = CallbackQuery(
            id="q1",
            from_user=user or make_user(),
            chat_instance="ci",
            data=data,
            message=(message or make_message()) if with_message else None,
            inline_message_id=None if with_message else "inline-1",
        )
        return Update(update_id=1, callback_query=query)

    return _make


@pytest.fixture
def make_reaction_update(make_user):
    """Factory: build an Update carrying a reaction change."""

    def _make(
        old: tuple[str, ...] = (),
        new: tuple[str, ...] = (),
        *,
        message_id: int = 42,
        user: User | None = None,
        anonymous: bool = False,
    ) -> Update:
        chat = Chat(id=CHAT_ID, type=Chat.PRIVATE)
        reaction = MessageReactionUpdated(
            chat=chat,
            message_id=message_id,
            date=datetime.now(UTC),
            old_reaction=tuple(ReactionTypeEmoji(e) for e in old),
            new_reaction=tuple(ReactionTypeEmoji(e) for e in new),
            user=None if anonymous else (user or make_user()),
            actor_chat=chat if anonymous else None,
        )
        return Update(update_id=2, message_reaction=reaction)

    return _make


@pytest.fixture
def press(make_user):
    """Factory: dispatch a button press through the router."""

    async def _press(
        router: InteractionRouter,
        message: MessageRef,
        glyph: str,
        user: User | None = None,
    ) -> bool:
        ctx = InteractionContext(
            key=message.key,
            kind=EventKind.BUTTON,
            message=message,
            user=user or make_user(),
            glyph=glyph,
        )
        return await router.dispatch(ctx)

    return _press
