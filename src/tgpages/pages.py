"""Top-level helpers: build a controller, attach it, return it.

    opts = InteractivityOptions().with_timeout(60)
    await paginate(message, ["page 1", "page 2"], opts)

The message must already be sent; ``activate(application)`` must have been
called once beforehand.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .config import MissingActionPolicy
from .controllers import (
    ButtonAction,
    ButtonController,
    LazyPaginationController,
    MenuController,
    PageLoader,
    PaginatedMenuController,
    PaginationController,
)
from .models import InteractivityOptions
from .registry import get_registry
from .scheduler import get_scheduler


async def paginate(
    message: Any,
    pages: Iterable[Any],
    options: InteractivityOptions | None = None,
    *,
    skip_amount: int = 0,
    fast_forward: bool = False,
) -> PaginationController:
    controller = PaginationController(
        message, pages, options, skip_amount=skip_amount, fast_forward=fast_forward
    )
    await controller.attach()
    return controller


async def lazy_paginate(
    message: Any,
    loader: PageLoader,
    options: InteractivityOptions | None = None,
    *,
    cache: bool = True,
) -> LazyPaginationController:
    controller = LazyPaginationController(message, loader, options, cache=cache)
    await controller.attach()
    return controller


async def categorize(
    message: Any,
    categories: Mapping[str, Any],
    options: InteractivityOptions | None = None,
) -> MenuController:
    controller = MenuController(message, categories, options)
    await controller.attach()
    return controller


async def pagino_categorize(
    message: Any,
    categories_per_page: Sequence[Mapping[str, Any]],
    faces: Sequence[Any | None] | None = None,
    options: InteractivityOptions | None = None,
    *,
    skip_amount: int = 0,
    fast_forward: bool = False,
) -> PaginatedMenuController:
    controller = PaginatedMenuController(
        message,
        categories_per_page,
        faces,
        options,
        skip_amount=skip_amount,
        fast_forward=fast_forward,
    )
    await controller.attach()
    return controller


async def buttonize(
    message: Any,
    buttons: Mapping[str, ButtonAction],
    options: InteractivityOptions | None = None,
    *,
    reload: bool = False,
    missing_action: MissingActionPolicy | None = None,
    selections: Mapping[str, Sequence[str]] | None = None,
) -> ButtonController:
    controller = ButtonController(
        message,
        buttons,
        options,
        reload=reload,
        missing_action=missing_action,
        selections=selections,
    )
    await controller.attach()
    return controller


def reset_all() -> None:
    """Forget every registration and pending expiry.

    Breaks all active interactivity; meant for tests and shutdown.
    """
    get_scheduler().clear()
    get_registry().clear()
