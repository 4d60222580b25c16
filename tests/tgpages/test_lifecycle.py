"""Tests for controller expiry, close-once semantics and reset_all."""

import asyncio
from unittest.mock import call

from tgpages.config import Emote, config
from tgpages.errors import TargetUnavailableError
from tgpages.models import ExpiryPolicy, InteractivityOptions
from tgpages.pages import buttonize, categorize, paginate, reset_all
from tgpages.registry import get_registry
from tgpages.scheduler import get_scheduler


class TestExpiry:
    async def test_expires_after_idle_timeout(
        self, router, gateway, message_ref
    ) -> None:
        closed: list = []
        opts = InteractivityOptions().with_timeout(0.05).with_on_close(closed.append)
        await paginate(message_ref, ["a", "b"], opts)
        await asyncio.sleep(0.15)
        assert not get_registry().has(message_ref.key)
        gateway.set_markup.assert_called_once_with(message_ref, None)
        assert closed == [message_ref]

    async def test_activity_postpones_expiry(self, router, press, message_ref) -> None:
        opts = InteractivityOptions().with_timeout(0.1)
        await paginate(message_ref, ["a", "b", "c"], opts)
        await asyncio.sleep(0.06)
        await press(router, message_ref, config.get_emote(Emote.NEXT))
        await asyncio.sleep(0.06)
        assert get_registry().has(message_ref.key)
        await asyncio.sleep(0.1)
        assert not get_registry().has(message_ref.key)

    async def test_fixed_deadline_ignores_activity(
        self, router, press, message_ref
    ) -> None:
        opts = InteractivityOptions().with_timeout(0.1, ExpiryPolicy.FIXED_DEADLINE)
        await paginate(message_ref, ["a", "b", "c"], opts)
        await asyncio.sleep(0.06)
        await press(router, message_ref, config.get_emote(Emote.NEXT))
        await asyncio.sleep(0.08)
        assert not get_registry().has(message_ref.key)

    async def test_reaction_controls_cleared(
        self, router, gateway, message_ref
    ) -> None:
        opts = InteractivityOptions().with_timeout(0.02).with_reactions()
        await paginate(message_ref, ["a"], opts)
        await asyncio.sleep(0.08)
        gateway.clear_reactions.assert_called_once_with(message_ref)


class TestClose:
    async def test_on_close_once(self, router, message_ref) -> None:
        calls: list = []

        async def on_close(message) -> None:
            calls.append(message)

        ctl = await paginate(
            message_ref, ["a"], InteractivityOptions().with_on_close(on_close)
        )
        await ctl.cancel()
        await ctl.cancel()
        await ctl.lifecycle.expire()
        assert calls == [message_ref]

    async def test_cleanup_failure_still_closes(
        self, router, gateway, message_ref
    ) -> None:
        gateway.set_markup.side_effect = TargetUnavailableError(1, 2, "gone")
        closed: list = []
        ctl = await paginate(
            message_ref, ["a"], InteractivityOptions().with_on_close(closed.append)
        )
        await ctl.cancel()
        assert closed == [message_ref]
        assert not get_registry().has(message_ref.key)

    async def test_action_closing_controller(self, router, press, message_ref) -> None:
        holder: dict = {}

        async def finish(user, message) -> None:
            await holder["ctl"].cancel()

        holder["ctl"] = await buttonize(
            message_ref, {"✅": finish}, InteractivityOptions().with_timeout(60)
        )
        await press(router, message_ref, "✅")
        assert not get_registry().has(message_ref.key)
        assert not get_scheduler().pending(message_ref.key)


class TestTakeover:
    async def test_pages_opened_from_button_survive_its_expiry(
        self, router, gateway, press, message_ref
    ) -> None:
        opened: dict = {}

        async def open_pages(user, message) -> None:
            opened["ctl"] = await paginate(message, ["a", "b"])

        await buttonize(
            message_ref, {"📖": open_pages}, InteractivityOptions().with_timeout(0.05)
        )
        await press(router, message_ref, "📖")
        await asyncio.sleep(0.15)

        pages = opened["ctl"]
        assert get_registry().get(message_ref.key) == pages.handle
        assert call(message_ref, None) not in gateway.set_markup.call_args_list

        await press(router, message_ref, config.get_emote(Emote.NEXT))
        assert pages.index == 1

    async def test_superseded_close_leaves_new_owner(
        self, router, gateway, message_ref
    ) -> None:
        closed: list = []
        opts = InteractivityOptions().with_timeout(60).with_on_close(closed.append)
        old = await paginate(message_ref, ["a"], opts)
        new = await categorize(message_ref, {"A": "a"})

        assert old.lifecycle.superseded
        assert not get_scheduler().pending(message_ref.key)
        await old.cancel()
        old.lifecycle.touch()

        assert get_registry().get(message_ref.key) == new.handle
        assert not get_scheduler().pending(message_ref.key)
        assert call(message_ref, None) not in gateway.set_markup.call_args_list
        assert closed == []


async def test_reset_all(router, message_ref) -> None:
    opts = InteractivityOptions().with_timeout(60)
    ref = (await paginate(message_ref, ["a"], opts)).lifecycle.reference
    reset_all()
    assert len(get_registry()) == 0
    assert len(get_scheduler()) == 0
    assert ref.get() is None
