"""Paged categories: navigate between pages, each with its own category menu.

Every page carries a mapping of category glyphs to Pages and, optionally, a
face Page shown when the page is reached. Navigation works like
PaginationController (clamped, skip and fast-forward controls); category
glyphs work like MenuController, scoped to the current page. Changing page
forgets the current category, so the first category pressed on the new
page always renders.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from telegram import InlineKeyboardMarkup, User

from ..callback_data import validate_glyph
from ..config import Emote, config
from ..errors import EmptyPageCollectionError, InvalidEmoteError, InvalidOptionsError
from ..keyboards import (
    check_button_count,
    paginated_menu_keyboard,
    pagination_controls,
)
from ..models import (
    EventKind,
    InteractionContext,
    InteractivityOptions,
    MessageRef,
    Page,
)
from ..registry import ActionReference
from .lifecycle import Lifecycle
from .pagination import step

logger = logging.getLogger(__name__)


class PaginatedMenuController:
    def __init__(
        self,
        message: Any,
        categories_per_page: Sequence[Mapping[str, Any]],
        faces: Sequence[Any | None] | None = None,
        options: InteractivityOptions | None = None,
        *,
        skip_amount: int = 0,
        fast_forward: bool = False,
    ) -> None:
        if not categories_per_page:
            raise EmptyPageCollectionError("Paged menu needs at least one page")
        if skip_amount < 0:
            raise InvalidOptionsError(f"skip_amount must be >= 0, got {skip_amount}")
        if faces is not None and len(faces) != len(categories_per_page):
            raise InvalidOptionsError(
                f"Got {len(faces)} faces for {len(categories_per_page)} pages"
            )

        self.message = MessageRef.of(message)
        self.options = options or InteractivityOptions()
        self.skip_amount = skip_amount
        self.categories = [
            {validate_glyph(glyph): Page.of(content) for glyph, content in cats.items()}
            for cats in categories_per_page
        ]
        self.faces = [
            None if face is None else Page.of(face)
            for face in (faces or [None] * len(self.categories))
        ]
        self.controls = pagination_controls(
            cancellable=self.options.cancellable,
            skip=skip_amount > 1,
            fast_forward=fast_forward,
        )

        navigation = {config.get_emote(e) for e in self.controls}
        for cats in self.categories:
            for glyph in cats:
                if glyph in navigation:
                    raise InvalidEmoteError(
                        f"Category glyph {glyph!r} is already a navigation control"
                    )
        check_button_count(
            len(self.controls) + max(len(cats) for cats in self.categories)
        )

        self.index = 0
        self.current: str | None = None
        self.lifecycle = Lifecycle(self.message, self.options)

    @property
    def page_categories(self) -> dict[str, Page]:
        return self.categories[self.index]

    @property
    def face(self) -> Page | None:
        return self.faces[self.index]

    def move(self, emote: Emote) -> bool:
        """Apply a navigation control; a page change resets the category."""
        if emote not in self.controls:
            return False
        target = step(emote, self.index, len(self.categories) - 1, self.skip_amount)
        if target is None or target == self.index:
            return False
        self.index = target
        self.current = None
        return True

    def markup(self) -> InlineKeyboardMarkup | None:
        if not self.options.use_buttons:
            return None
        return paginated_menu_keyboard(self.controls, list(self.page_categories))

    def reactions(self) -> list[str]:
        return [config.get_emote(e) for e in self.controls] + list(self.page_categories)

    async def show_page(self) -> None:
        """Show the current page's face (if any) and its controls."""
        gateway = self.lifecycle.gateway
        face = self.face
        if face is not None:
            await gateway.render(self.message, face, self.markup())
        elif self.options.use_buttons:
            await gateway.set_markup(self.message, self.markup())
        if not self.options.use_buttons:
            await gateway.clear_reactions(self.message)
            await gateway.add_reactions(self.message, self.reactions())

    async def attach(self) -> ActionReference:
        await self.show_page()
        return self.lifecycle.register(self.handle)

    async def handle(self, user: User, ctx: InteractionContext) -> None:
        if self.lifecycle.closed or ctx.kind is EventKind.SELECTION:
            return
        if not self.options.allows(user):
            return
        glyph = ctx.glyph
        emote = config.emote_for(glyph)
        if emote is Emote.CANCEL and self.options.cancellable:
            await self.lifecycle.close()
            return

        if emote is not None and self.move(emote):
            logger.debug("Event %s moved to category page %d", ctx.key, self.index)
            await self.show_page()
            self.lifecycle.touch()
            return

        page = self.page_categories.get(glyph)
        if page is None or glyph == self.current:
            return
        await self.lifecycle.gateway.render(self.message, page, self.markup())
        self.current = glyph
        logger.debug("Event %s switched to category %s", ctx.key, glyph)
        self.lifecycle.touch()

    async def cancel(self) -> None:
        await self.lifecycle.close()
