"""Categorized menu: one glyph per category, pressing it shows that page.

State is the glyph of the category on display (None until the first
press). Pressing the current category again does nothing.
"""

import logging
from collections.abc import Mapping
from typing import Any

from telegram import InlineKeyboardMarkup, User

from ..callback_data import validate_glyph
from ..config import Emote, config
from ..errors import EmptyPageCollectionError
from ..keyboards import check_button_count, count_controls, glyph_keyboard
from ..models import (
    EventKind,
    InteractionContext,
    InteractivityOptions,
    MessageRef,
    Page,
)
from ..registry import ActionReference
from .lifecycle import Lifecycle

logger = logging.getLogger(__name__)


class MenuController:
    def __init__(
        self,
        message: Any,
        categories: Mapping[str, Any],
        options: InteractivityOptions | None = None,
    ) -> None:
        if not categories:
            raise EmptyPageCollectionError("Menu needs at least one category")
        self.categories = {
            validate_glyph(glyph): Page.of(content)
            for glyph, content in categories.items()
        }
        self.message = MessageRef.of(message)
        self.options = options or InteractivityOptions()
        self.current: str | None = None
        self.glyphs = list(self.categories)
        check_button_count(
            count_controls(self.glyphs, cancellable=self.options.cancellable)
        )
        self.lifecycle = Lifecycle(self.message, self.options)

    def markup(self) -> InlineKeyboardMarkup | None:
        if not self.options.use_buttons:
            return None
        return glyph_keyboard(self.glyphs, cancellable=self.options.cancellable)

    async def attach(self) -> ActionReference:
        """Add the category controls; the message content is left as is."""
        gateway = self.lifecycle.gateway
        if self.options.use_buttons:
            await gateway.set_markup(self.message, self.markup())
        else:
            glyphs = list(self.glyphs)
            cancel = config.get_emote(Emote.CANCEL)
            if self.options.cancellable and cancel not in glyphs:
                glyphs.append(cancel)
            await gateway.add_reactions(self.message, glyphs)
        return self.lifecycle.register(self.handle)

    async def handle(self, user: User, ctx: InteractionContext) -> None:
        if self.lifecycle.closed or ctx.kind is EventKind.SELECTION:
            return
        if not self.options.allows(user):
            return
        glyph = ctx.glyph
        if self.options.cancellable and glyph == config.get_emote(Emote.CANCEL):
            await self.lifecycle.close()
            return
        page = self.categories.get(glyph)
        if page is None or glyph == self.current:
            return
        await self.lifecycle.gateway.render(self.message, page, self.markup())
        self.current = glyph
        logger.debug("Event %s switched to category %s", ctx.key, glyph)
        self.lifecycle.touch()
