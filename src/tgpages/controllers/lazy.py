"""Pagination over pages produced on demand.

``loader(index)`` returns the page at an index (str, Embed, list of Embeds
or Page), or None when there is no page there. It may be sync or async.
Only PREVIOUS, NEXT and CANCEL are offered since the page count is unknown.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from telegram import InlineKeyboardMarkup, User

from ..config import Emote, config
from ..errors import EmptyPageCollectionError
from ..keyboards import pagination_controls, pagination_keyboard
from ..models import (
    EventKind,
    InteractionContext,
    InteractivityOptions,
    MessageRef,
    Page,
)
from ..registry import ActionReference
from .lifecycle import Lifecycle, maybe_await

logger = logging.getLogger(__name__)

PageLoader = Callable[[int], Any | Awaitable[Any]]


class LazyPaginationController:
    def __init__(
        self,
        message: Any,
        loader: PageLoader,
        options: InteractivityOptions | None = None,
        *,
        cache: bool = True,
    ) -> None:
        self.message = MessageRef.of(message)
        self.loader = loader
        self.options = options or InteractivityOptions()
        self.cache = cache
        self.index = 0
        self.page: Page | None = None
        self._cached: dict[int, Page] = {}
        self.controls = pagination_controls(cancellable=self.options.cancellable)
        self.lifecycle = Lifecycle(self.message, self.options)

    async def load(self, index: int) -> Page | None:
        """Fetch a page through the loader (or the cache)."""
        if index < 0:
            return None
        if index in self._cached:
            return self._cached[index]
        content = await maybe_await(self.loader, index)
        if content is None:
            return None
        page = Page.of(content)
        if self.cache:
            self._cached[index] = page
        return page

    def markup(self) -> InlineKeyboardMarkup | None:
        if not self.options.use_buttons:
            return None
        return pagination_keyboard(self.controls)

    async def attach(self) -> ActionReference:
        gateway = self.lifecycle.gateway
        self.page = await self.load(0)
        if self.page is None:
            raise EmptyPageCollectionError("Page loader returned nothing for page 0")
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
        if emote is Emote.CANCEL and self.options.cancellable:
            await self.lifecycle.close()
            return
        if emote is Emote.NEXT:
            target = self.index + 1
        elif emote is Emote.PREVIOUS:
            target = self.index - 1
        else:
            return

        page = await self.load(target)
        if page is None:
            logger.debug("Event %s has no page %d", ctx.key, target)
            return
        self.index, self.page = target, page
        await self.lifecycle.gateway.render(self.message, page, self.markup())
        self.lifecycle.touch()
