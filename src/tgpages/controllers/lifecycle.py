"""Registration, expiry and closing shared by every controller.

A Lifecycle belongs to exactly one controller and one message. It owns the
event key, installs the controller's callback in the registry, arms the
idle-expiry timer and performs the one-shot close: unregister, cancel
expiry, strip the controls (or delete the message) and call ``on_close``.

Ownership lasts only while the registry holds this lifecycle's callback.
Once another controller registers on the same message (a button that opens
pages in place, for example) the old lifecycle is superseded: arming,
touching and closing it leave the key, its expiry and the message alone.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from telegram.error import TelegramError

from ..config import config
from ..errors import TargetUnavailableError
from ..gateway import MessageGateway
from ..models import Callback, ExpiryPolicy, InteractivityOptions, MessageRef
from ..registry import ActionReference, get_registry
from ..router import get_router
from ..scheduler import get_scheduler

logger = logging.getLogger(__name__)

# Failures while removing controls; closing goes on regardless
_CleanupError = (TargetUnavailableError, TelegramError)


async def maybe_await(func: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async callable and return its result."""
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Lifecycle:
    def __init__(self, message: MessageRef, options: InteractivityOptions) -> None:
        self.message = message
        self.options = options
        self.key = message.key
        self.closed = False
        self.reference: ActionReference | None = None
        self._callback: Callback | None = None
        self._gateway: MessageGateway | None = None

    @property
    def gateway(self) -> MessageGateway:
        """Gateway of the active router (InvalidStateError when inactive)."""
        if self._gateway is None:
            self._gateway = get_router().gateway
        return self._gateway

    @property
    def superseded(self) -> bool:
        """True once another controller's callback holds this message's key."""
        current = get_registry().get(self.key)
        return current is not None and current is not self._callback

    @property
    def active(self) -> bool:
        return not self.closed and not self.superseded

    def register(self, callback: Callback) -> ActionReference:
        """Install the callback under this message's key and arm expiry."""
        self._callback = callback
        self.reference = get_registry().register(self.key, callback)
        self.arm()
        return self.reference

    def arm(self) -> None:
        """(Re)start the idle-expiry timer. Timeout 0 means no expiry."""
        if not self.active:
            return
        get_scheduler().schedule(self.key, self.expire, self.options.timeout)

    def touch(self) -> None:
        """Record activity; restarts expiry unless the deadline is fixed."""
        if self.options.expiry is ExpiryPolicy.RESCHEDULE_ON_ACTIVITY:
            self.arm()

    async def strip_controls(self) -> None:
        if self.options.use_buttons:
            await self.gateway.set_markup(self.message, None)
        else:
            await self.gateway.clear_reactions(self.message)

    async def close(self) -> None:
        """Stop listening and remove the controls. Runs once."""
        if self.closed:
            return
        self.closed = True
        if self.superseded:
            logger.debug("Event %s was taken over, leaving it in place", self.key)
            return
        get_registry().unregister(self.key)
        get_scheduler().cancel(self.key)

        try:
            if config.delete_on_cancel:
                await self.gateway.delete(self.message)
            else:
                await self.strip_controls()
        except _CleanupError as e:
            logger.warning("Could not clean up message of event %s: %s", self.key, e)

        if self.options.on_close is not None:
            await maybe_await(self.options.on_close, self.message)

    async def expire(self) -> None:
        logger.info("Event %s expired after %.0fs idle", self.key, self.options.timeout)
        await self.close()
