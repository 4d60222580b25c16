"""Process-wide event registry.

Maps event keys to the callback of the controller that owns the message,
plus two side tables: a set of keys whose callback is currently running
(advisory re-entrancy locks) and the last selection values per key.

All state sits behind one threading.Lock, so the registry may be used from
PTB's asyncio handlers and from host threads alike. There is one registry
per process (``get_registry()``); ``clear()`` drops every registration and
breaks all active interactivity.

Key classes: EventRegistry, ActionReference.
"""

import logging
import threading
from collections.abc import Callable, Sequence

from .models import Callback

logger = logging.getLogger(__name__)


class ActionReference:
    """Non-owning handle telling whether a key is still registered.

    Holds the key and the registry's membership check only, never the
    callback. Once the key is gone ``get()`` returns None for good.
    """

    __slots__ = ("_key", "_has")

    def __init__(self, key: str, has: Callable[[str], bool]) -> None:
        self._key: str | None = key
        self._has = has

    def get(self) -> str | None:
        """The key while it is registered, None afterwards."""
        if self._key is not None and not self._has(self._key):
            self._key = None
        return self._key

    def check(self) -> bool:
        return self.get() is not None

    def __bool__(self) -> bool:
        return self.check()

    def __repr__(self) -> str:
        return f"ActionReference({self._key!r})"


class EventRegistry:
    """Thread-safe key → callback map with lock set and selection table."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._callbacks: dict[str, Callback] = {}
        self._locks: set[str] = set()
        self._selections: dict[str, dict[str, list[str]]] = {}

    # ── Callbacks ────────────────────────────────────────────────────────

    def register(self, key: str, callback: Callback) -> ActionReference:
        """Install (or replace) the callback for a key."""
        with self._mutex:
            replaced = key in self._callbacks
            self._callbacks[key] = callback
        logger.debug("Added event with ID %s%s", key, " (replaced)" if replaced else "")
        return ActionReference(key, self.has)

    def unregister(self, key: str) -> None:
        """Remove a key and its side-table entries. Missing keys are ignored."""
        with self._mutex:
            removed = self._callbacks.pop(key, None) is not None
            self._locks.discard(key)
            self._selections.pop(key, None)
        if removed:
            logger.debug("Removed event with ID %s", key)

    def has(self, key: str | None) -> bool:
        if key is None:
            return False
        with self._mutex:
            return key in self._callbacks

    def get(self, key: str) -> Callback | None:
        with self._mutex:
            return self._callbacks.get(key)

    def keys(self) -> list[str]:
        with self._mutex:
            return list(self._callbacks)

    def __len__(self) -> int:
        with self._mutex:
            return len(self._callbacks)

    def clear(self) -> None:
        """Drop every registration. Breaks all active interactivity."""
        with self._mutex:
            count = len(self._callbacks)
            self._callbacks.clear()
            self._locks.clear()
            self._selections.clear()
        logger.warning("Cleared all active events (%d)", count)

    # ── Selections ───────────────────────────────────────────────────────

    def record_selection(
        self, key: str, component_id: str, values: Sequence[str]
    ) -> None:
        with self._mutex:
            self._selections.setdefault(key, {})[component_id] = list(values)
        logger.debug("Recorded selection %s=%s for event %s", component_id, values, key)

    def get_selections(self, key: str) -> dict[str, list[str]]:
        """Copy of the recorded selections for a key (empty if none)."""
        with self._mutex:
            table = self._selections.get(key, {})
            return {component: list(values) for component, values in table.items()}

    # ── Re-entrancy locks ────────────────────────────────────────────────

    def lock(self, key: str) -> None:
        with self._mutex:
            self._locks.add(key)
        logger.debug("Locked event with ID %s", key)

    def try_lock(self, key: str) -> bool:
        """Lock a key unless it is already locked. Returns True if acquired."""
        with self._mutex:
            if key in self._locks:
                return False
            self._locks.add(key)
        logger.debug("Locked event with ID %s", key)
        return True

    def unlock(self, key: str) -> None:
        with self._mutex:
            self._locks.discard(key)
        logger.debug("Unlocked event with ID %s", key)

    def is_locked(self, key: str) -> bool:
        with self._mutex:
            return key in self._locks


# Singleton cache
_registry: EventRegistry | None = None


def get_registry() -> EventRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = EventRegistry()
    return _registry
