"""Tests for LazyPaginationController on-demand loading."""

import pytest

from tgpages.config import Emote, config
from tgpages.errors import EmptyPageCollectionError
from tgpages.models import Embed
from tgpages.pages import lazy_paginate
from tgpages.registry import get_registry


def _rendered(gateway) -> list[str]:
    return [c.args[1].to_markdown() for c in gateway.render.call_args_list]


@pytest.fixture
def loader():
    """Loader with three pages that records every index it is asked for."""
    requests: list[int] = []

    def _load(index: int):
        requests.append(index)
        return f"page {index}" if index < 3 else None

    _load.requests = requests
    return _load


class TestLazyPagination:
    async def test_walk_forward_and_back(
        self, router, gateway, press, message_ref, loader
    ) -> None:
        ctl = await lazy_paginate(message_ref, loader)
        next_, prev = config.get_emote(Emote.NEXT), config.get_emote(Emote.PREVIOUS)

        for _ in range(4):
            await press(router, message_ref, next_)
        assert ctl.index == 2
        assert _rendered(gateway) == ["page 0", "page 1", "page 2"]

        await press(router, message_ref, prev)
        assert ctl.index == 1
        assert _rendered(gateway)[-1] == "page 1"

    async def test_cache(self, router, press, message_ref, loader) -> None:
        next_, prev = config.get_emote(Emote.NEXT), config.get_emote(Emote.PREVIOUS)
        await lazy_paginate(message_ref, loader)
        await press(router, message_ref, next_)
        await press(router, message_ref, prev)
        await press(router, message_ref, next_)
        assert loader.requests == [0, 1]

    async def test_no_cache(self, router, press, message_ref, loader) -> None:
        next_, prev = config.get_emote(Emote.NEXT), config.get_emote(Emote.PREVIOUS)
        await lazy_paginate(message_ref, loader, cache=False)
        await press(router, message_ref, next_)
        await press(router, message_ref, prev)
        assert loader.requests == [0, 1, 0]

    async def test_async_loader(self, router, gateway, press, message_ref) -> None:
        async def load(index: int):
            return Embed(title=f"#{index}") if index < 2 else None

        ctl = await lazy_paginate(message_ref, load)
        await press(router, message_ref, config.get_emote(Emote.NEXT))
        assert ctl.index == 1
        assert "#1" in _rendered(gateway)[-1]

    async def test_empty_first_page(self, router, gateway, message_ref) -> None:
        with pytest.raises(EmptyPageCollectionError):
            await lazy_paginate(message_ref, lambda index: None)
        gateway.render.assert_not_called()
        assert not get_registry().has(message_ref.key)

    async def test_cancel(self, router, gateway, press, message_ref, loader) -> None:
        await lazy_paginate(message_ref, loader)
        await press(router, message_ref, config.get_emote(Emote.CANCEL))
        assert not get_registry().has(message_ref.key)
        gateway.set_markup.assert_called_once_with(message_ref, None)
