"""Clickable buttons: each glyph runs its own action.

Actions are called as ``action(user, message)`` with the pressing user and
the MessageRef; they may be sync or async. Optional selection components
render as toggle rows below the buttons; the router records toggled values
and this controller redraws the toggle state.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from telegram import InlineKeyboardMarkup, User

from ..callback_data import selection_data, validate_glyph
from ..config import Emote, MissingActionPolicy, config
from ..errors import (
    EmptyPageCollectionError,
    InvalidOptionsError,
    MissingActionError,
)
from ..keyboards import check_button_count, count_controls, glyph_keyboard
from ..models import EventKind, InteractionContext, InteractivityOptions, MessageRef
from ..registry import ActionReference, get_registry
from .lifecycle import Lifecycle, maybe_await

logger = logging.getLogger(__name__)

ButtonAction = Callable[[User, MessageRef], Awaitable[None] | None]


class ButtonController:
    def __init__(
        self,
        message: Any,
        buttons: Mapping[str, ButtonAction],
        options: InteractivityOptions | None = None,
        *,
        reload: bool = False,
        missing_action: MissingActionPolicy | None = None,
        selections: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        if not buttons and not selections:
            raise EmptyPageCollectionError("Buttons need at least one glyph")
        self.buttons = {validate_glyph(g): action for g, action in buttons.items()}
        self.message = MessageRef.of(message)
        self.options = options or InteractivityOptions()
        self.reload = reload
        self.missing_action = missing_action
        self.components = {c: list(values) for c, values in (selections or {}).items()}
        if self.components and not self.options.use_buttons:
            raise InvalidOptionsError("Selection components need button controls")
        for component, values in self.components.items():
            for value in values:
                selection_data(component, value)
        self.glyphs = list(self.buttons)
        check_button_count(
            count_controls(
                self.glyphs,
                cancellable=self.options.cancellable,
                selections=self.components,
            )
        )
        self.lifecycle = Lifecycle(self.message, self.options)

    @property
    def selections(self) -> dict[str, list[str]]:
        """Currently selected values per component."""
        recorded = get_registry().get_selections(self.lifecycle.key)
        return {c: recorded.get(c, []) for c in self.components}

    def markup(self) -> InlineKeyboardMarkup:
        return glyph_keyboard(
            self.glyphs,
            cancellable=self.options.cancellable,
            selections=self.components,
            chosen=self.selections,
        )

    async def show_controls(self) -> None:
        gateway = self.lifecycle.gateway
        if self.options.use_buttons:
            await gateway.set_markup(self.message, self.markup())
            return
        glyphs = list(self.glyphs)
        cancel = config.get_emote(Emote.CANCEL)
        if self.options.cancellable and cancel not in glyphs:
            glyphs.append(cancel)
        await gateway.add_reactions(self.message, glyphs)

    async def attach(self) -> ActionReference:
        await self.show_controls()
        return self.lifecycle.register(self.handle)

    async def handle(self, user: User, ctx: InteractionContext) -> None:
        if self.lifecycle.closed or not self.options.allows(user):
            return

        if ctx.kind is EventKind.SELECTION:
            if ctx.component in self.components:
                await self.lifecycle.gateway.set_markup(self.message, self.markup())
                self.lifecycle.touch()
            return

        action = self.buttons.get(ctx.glyph)
        if action is not None:
            await maybe_await(action, user, self.message)
            self.lifecycle.touch()
            if self.reload and self.lifecycle.active:
                await self.show_controls()
            return

        if self.options.cancellable and ctx.glyph == config.get_emote(Emote.CANCEL):
            await self.lifecycle.close()
            return

        policy = self.missing_action or config.missing_action
        if policy is MissingActionPolicy.RAISE:
            raise MissingActionError(
                f"No action bound to {ctx.glyph!r} on event {ctx.key}"
            )
        logger.debug("No action bound to %r on event %s", ctx.glyph, ctx.key)

    async def cancel(self) -> None:
        await self.lifecycle.close()
