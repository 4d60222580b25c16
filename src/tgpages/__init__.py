"""tgpages - pagination, menus and buttons for python-telegram-bot messages.

Call ``activate(application)`` once, then attach interactivity to messages
that were already sent with ``paginate``, ``lazy_paginate``, ``categorize``,
``pagino_categorize`` or ``buttonize``.
"""

from .config import Emote, LogLevel, MissingActionPolicy, UnmappedPolicy, config
from .controllers import (
    ButtonController,
    LazyPaginationController,
    MenuController,
    PaginatedMenuController,
    PaginationController,
)
from .errors import (
    AlreadyActivatedError,
    EmptyPageCollectionError,
    InvalidEmoteError,
    InvalidHandlerError,
    InvalidOptionsError,
    InvalidPageError,
    InvalidStateError,
    MissingActionError,
    PagesError,
    TargetUnavailableError,
    TooManyButtonsError,
)
from .gateway import MessageGateway, TelegramGateway
from .log import setup_logging
from .models import (
    Embed,
    EmbedField,
    EventKind,
    ExpiryPolicy,
    InteractionContext,
    InteractivityOptions,
    MessageRef,
    Page,
)
from .pages import (
    buttonize,
    categorize,
    lazy_paginate,
    paginate,
    pagino_categorize,
    reset_all,
)
from .registry import ActionReference, get_registry
from .router import activate, deactivate, get_router, is_activated

__version__ = "0.1.0"

__all__ = [
    "ActionReference",
    "AlreadyActivatedError",
    "ButtonController",
    "Embed",
    "EmbedField",
    "Emote",
    "EmptyPageCollectionError",
    "EventKind",
    "ExpiryPolicy",
    "InteractionContext",
    "InteractivityOptions",
    "InvalidEmoteError",
    "InvalidHandlerError",
    "InvalidOptionsError",
    "InvalidPageError",
    "InvalidStateError",
    "LazyPaginationController",
    "LogLevel",
    "MenuController",
    "MessageGateway",
    "MessageRef",
    "MissingActionError",
    "MissingActionPolicy",
    "Page",
    "PagesError",
    "PaginatedMenuController",
    "PaginationController",
    "TargetUnavailableError",
    "TelegramGateway",
    "TooManyButtonsError",
    "UnmappedPolicy",
    "activate",
    "buttonize",
    "categorize",
    "config",
    "deactivate",
    "get_registry",
    "get_router",
    "is_activated",
    "lazy_paginate",
    "paginate",
    "pagino_categorize",
    "reset_all",
    "setup_logging",
]
