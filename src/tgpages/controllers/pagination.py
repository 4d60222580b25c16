"""Page-by-page navigation over a fixed list of pages.

State is the current page index. PREVIOUS/NEXT step by one, SKIP_BACKWARD/
SKIP_FORWARD by ``skip_amount`` (shown when it is above 1), GOTO_FIRST/
GOTO_LAST jump to the ends (shown with ``fast_forward``). Every move is
clamped to the page range; a move that does not change the index does not
re-render. CANCEL closes the controller.
"""

import logging
from collections.abc import Iterable
from typing import Any

from telegram import InlineKeyboardMarkup, User

from ..config import Emote, config
from ..errors import EmptyPageCollectionError, InvalidOptionsError
from ..keyboards import check_button_count, pagination_controls, pagination_keyboard
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


def step(emote: Emote, index: int, last: int, skip_amount: int) -> int | None:
    """Index a navigation control leads to, clamped to ``0..last``.

    None for controls that do not navigate (CANCEL, category glyphs).
    """
    target = {
        Emote.PREVIOUS: index - 1,
        Emote.NEXT: index + 1,
        Emote.SKIP_BACKWARD: index - skip_amount,
        Emote.SKIP_FORWARD: index + skip_amount,
        Emote.GOTO_FIRST: 0,
        Emote.GOTO_LAST: last,
    }.get(emote)
    if target is None:
        return None
    return max(0, min(last, target))


class PaginationController:
    def __init__(
        self,
        message: Any,
        pages: Iterable[Any],
        options: InteractivityOptions | None = None,
        *,
        skip_amount: int = 0,
        fast_forward: bool = False,
    ) -> None:
        self.pages = [Page.of(p) for p in pages]
        if not self.pages:
            raise EmptyPageCollectionError("Pagination needs at least one page")
        if skip_amount < 0:
            raise InvalidOptionsError(f"skip_amount must be >= 0, got {skip_amount}")

        self.message = MessageRef.of(message)
        self.options = options or InteractivityOptions()
        self.skip_amount = skip_amount
        self.fast_forward = fast_forward
        self.index = 0
        self.controls = pagination_controls(
            cancellable=self.options.cancellable,
            skip=skip_amount > 1,
            fast_forward=fast_forward,
        )
        check_button_count(len(self.controls))
        self.lifecycle = Lifecycle(self.message, self.options)

    @property
    def page(self) -> Page:
        return self.pages[self.index]

    def move(self, emote: Emote) -> bool:
        """Apply a navigation control. Returns True if the page changed."""
        if emote not in self.controls:
            return False
        target = step(emote, self.index, len(self.pages) - 1, self.skip_amount)
        if target is None or target == self.index:
            return False
        self.index = target
        return True

    def markup(self) -> InlineKeyboardMarkup | None:
        if not self.options.use_buttons:
            return None
        return pagination_keyboard(self.controls)

    async def attach(self) -> ActionReference:
        """Show the first page with its controls and start listening."""
        gateway = self.lifecycle.gateway
        await gateway.render(self.message, self.page, self.markup())
        if not self.options.use_buttons:
            await gateway.add_reactions(
                self.message, [config.get_emote(e) for e in self.controls]
            )
        return self.lifecycle.register(self.handle)

    async def handle(self, user: User, ctx: InteractionContext) -> None:
        if self.lifecycle.closed or ctx.kind is EventKind.SELECTION:
            return
        if not self.options.allows(user):
            return
        emote = config.emote_for(ctx.glyph)
        if emote is None:
            return
        if emote is Emote.CANCEL and self.options.cancellable:
            await self.cancel()
            return
        if self.move(emote):
            logger.debug("Event %s moved to page %d", ctx.key, self.index)
            await self.lifecycle.gateway.render(self.message, self.page, self.markup())
            self.lifecycle.touch()

    async def cancel(self) -> None:
        await self.lifecycle.close()
