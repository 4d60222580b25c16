"""Interactive message controllers.

Each controller embeds an InteractivityOptions value and a Lifecycle that
owns registration, expiry and closing; the controllers only hold their own
state machine.
"""

from .buttons import ButtonAction, ButtonController
from .lazy import LazyPaginationController, PageLoader
from .lifecycle import Lifecycle
from .menu import MenuController
from .paginated_menu import PaginatedMenuController
from .pagination import PaginationController

__all__ = [
    "ButtonAction",
    "ButtonController",
    "LazyPaginationController",
    "Lifecycle",
    "MenuController",
    "PageLoader",
    "PaginatedMenuController",
    "PaginationController",
]
