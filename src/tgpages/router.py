"""Shared event router: one set of PTB handlers for every interactive message.

``activate(application)`` installs a CallbackQueryHandler (library prefix
only) and a MessageReactionHandler, both non-blocking, in their own handler
group. Each inbound update is reduced to an InteractionContext, its event
key is looked up in the registry, and the owning controller's callback runs:

  1. compute the key of the update's message
  2. unmapped key: acknowledge and apply config.unmapped_policy, stop
  3. resolve the user (anonymous reactions are dropped)
  4. drop bot users and keys whose callback is still running
  5. serialized mode: lock the key
  6. run the callback; its errors are logged with the key, never raised
  7. unlock

Reactions only arrive when the bot asks for them
(``allowed_updates=Update.ALL_TYPES`` or including "message_reaction") and
is an administrator of group chats.

Key functions: activate(), deactivate(), is_activated(), get_router().
"""

import logging
from typing import Any

from telegram import (
    CallbackQuery,
    Message,
    MessageReactionUpdated,
    ReactionTypeCustomEmoji,
    ReactionTypeEmoji,
    Update,
    User,
)
from telegram.error import TelegramError
from telegram.ext import (
    BaseHandler,
    CallbackQueryHandler,
    ContextTypes,
    MessageReactionHandler,
)

from .callback_data import CALLBACK_PATTERN, parse_callback_data
from .config import UnmappedPolicy, config
from .errors import (
    AlreadyActivatedError,
    InvalidHandlerError,
    InvalidStateError,
    TargetUnavailableError,
)
from .gateway import MessageGateway, TelegramGateway
from .log import apply_log_level
from .models import EventKind, InteractionContext, MessageRef
from .registry import get_registry
from .scheduler import get_scheduler

logger = logging.getLogger(__name__)


def _reaction_glyph(reaction: Any) -> str | None:
    if isinstance(reaction, ReactionTypeEmoji):
        return reaction.emoji
    if isinstance(reaction, ReactionTypeCustomEmoji):
        return reaction.custom_emoji_id
    return None


def reaction_diff(
    old: tuple[Any, ...], new: tuple[Any, ...]
) -> tuple[list[str], list[str]]:
    """Split a reaction update into (added, removed) glyphs."""
    before = [g for g in map(_reaction_glyph, old) if g]
    after = [g for g in map(_reaction_glyph, new) if g]
    added = [g for g in after if g not in before]
    removed = [g for g in before if g not in after]
    return added, removed


class InteractionRouter:
    """Demultiplexes Telegram updates to the callbacks in the registry."""

    def __init__(self, gateway: MessageGateway) -> None:
        self.gateway = gateway
        self.application: Any = None
        self.group = -1
        self.handlers: list[BaseHandler[Any, Any, Any]] = []

    # ── PTB entry points ─────────────────────────────────────────────────

    async def handle_callback_query(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        query = update.callback_query
        if not query:
            return
        parsed = parse_callback_data(query.data)
        if parsed is None:
            return
        if parsed.noop or query.message is None:
            # Counters, spacers, or an inline-mode message we cannot address
            await self._acknowledge(query)
            return

        message = MessageRef.of(query.message)
        key = message.key
        registry = get_registry()
        if not registry.has(key):
            await self._acknowledge(query)
            await self._handle_unmapped(message)
            return

        if not await self._acknowledge(query):
            return

        if parsed.component is not None:
            values = registry.get_selections(key).get(parsed.component, [])
            if parsed.value in values:
                values.remove(parsed.value)
            else:
                values.append(parsed.value)
            registry.record_selection(key, parsed.component, values)
            ctx = InteractionContext(
                key=key,
                kind=EventKind.SELECTION,
                message=message,
                user=query.from_user,
                query=query,
                component=parsed.component,
                values=tuple(values),
            )
        else:
            ctx = InteractionContext(
                key=key,
                kind=EventKind.BUTTON,
                message=message,
                user=query.from_user,
                glyph=parsed.glyph,
                query=query,
            )
        await self.dispatch(ctx)

    async def handle_message_reaction(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        reaction: MessageReactionUpdated | None = update.message_reaction
        if reaction is None:
            return
        if reaction.user is None:
            logger.debug("Ignoring anonymous reaction in chat %s", reaction.chat.id)
            return

        message = MessageRef.of(reaction)
        key = message.key
        if not get_registry().has(key):
            return

        added, removed = reaction_diff(reaction.old_reaction, reaction.new_reaction)
        # Switching reactions arrives as one update; only the new one is a press
        if added:
            kind, glyphs = EventKind.REACTION_ADDED, added
        else:
            kind, glyphs = EventKind.REACTION_REMOVED, removed
        for glyph in glyphs:
            await self.dispatch(
                InteractionContext(
                    key=key,
                    kind=kind,
                    message=message,
                    user=reaction.user,
                    glyph=glyph,
                )
            )

    # ── Dispatch ─────────────────────────────────────────────────────────

    async def dispatch(self, ctx: InteractionContext) -> bool:
        """Run the callback registered for ``ctx.key``.

        Returns True if a callback was invoked.
        """
        user: User = ctx.user
        if user.is_bot:
            return False

        registry = get_registry()
        serialized = config.event_locking
        if serialized:
            if not registry.try_lock(ctx.key):
                logger.debug("Event %s busy, dropping %s", ctx.key, ctx.kind.value)
                return False
        elif registry.is_locked(ctx.key):
            return False

        try:
            callback = registry.get(ctx.key)
            if callback is None:
                return False
            try:
                await callback(user, ctx)
            except TargetUnavailableError as e:
                logger.info("Message of event %s is gone: %s", ctx.key, e.reason)
                self.message_deleted(ctx.message)
            except Exception:
                logger.exception("Callback for event %s failed", ctx.key)
            return True
        finally:
            if serialized:
                registry.unlock(ctx.key)

    def message_deleted(self, message: Message | MessageRef) -> None:
        """Forget a message that was deleted; its controller stops listening."""
        key = MessageRef.of(message).key
        get_registry().unregister(key)
        get_scheduler().cancel(key)
        logger.debug("Dropped event %s after message deletion", key)

    # ── Helpers ──────────────────────────────────────────────────────────

    async def _acknowledge(self, query: CallbackQuery) -> bool:
        try:
            await self.gateway.acknowledge(query)
        except TelegramError as e:
            logger.error("Failed to answer callback query %s: %s", query.id, e)
            return False
        return True

    async def _handle_unmapped(self, message: MessageRef) -> None:
        policy = config.unmapped_policy
        if policy is UnmappedPolicy.IGNORE:
            return
        try:
            if policy is UnmappedPolicy.DELETE:
                await self.gateway.delete(message)
            else:
                await self.gateway.set_markup(message, None)
        except TargetUnavailableError as e:
            logger.debug("Unmapped message %s already gone: %s", message.key, e.reason)
            return
        except TelegramError as e:
            logger.warning(
                "Failed to %s unmapped message %s: %s", policy.value, message.key, e
            )
            return
        logger.debug("Applied %s to unmapped message %s", policy.value, message.key)


# ── Activation ───────────────────────────────────────────────────────────

_router: InteractionRouter | None = None


def activate(
    application: Any,
    *,
    gateway: MessageGateway | None = None,
    group: int = -1,
) -> InteractionRouter:
    """Install the shared handlers on a PTB Application.

    Must be called once before any controller is attached. ``group`` keeps
    the library's handlers apart from the host's own (group 0 by default).
    """
    global _router
    if _router is not None:
        raise AlreadyActivatedError("tgpages is already activated")
    if application is None or not callable(getattr(application, "add_handler", None)):
        raise InvalidHandlerError(
            f"Expected a telegram.ext.Application, got {type(application).__name__}"
        )
    if gateway is None:
        bot = getattr(application, "bot", None)
        if bot is None:
            raise InvalidHandlerError("Application has no bot to send requests with")
        gateway = TelegramGateway(bot)

    router = InteractionRouter(gateway)
    router.application = application
    router.group = group
    router.handlers = [
        CallbackQueryHandler(
            router.handle_callback_query, pattern=CALLBACK_PATTERN, block=False
        ),
        MessageReactionHandler(router.handle_message_reaction, block=False),
    ]
    for handler in router.handlers:
        application.add_handler(handler, group=group)

    apply_log_level(config.log_level)
    _router = router
    logger.info("tgpages activated (handler group %d)", group)
    return router


def deactivate() -> None:
    """Remove the shared handlers. No-op when not activated."""
    global _router
    router = _router
    if router is None:
        return
    for handler in router.handlers:
        router.application.remove_handler(handler, group=router.group)
    _router = None
    logger.info("tgpages deactivated")


def is_activated() -> bool:
    return _router is not None


def get_router() -> InteractionRouter:
    if _router is None:
        raise InvalidStateError(
            "tgpages is not activated; call tgpages.activate(application) first"
        )
    return _router
