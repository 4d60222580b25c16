"""Inline keyboard layouts for the controllers.

Builds the PTB markup every controller attaches to its message:
  - pagination_keyboard: one navigation row, in reading order
    [⏮] [⏪] ◀ ❎ ▶ [⏩] [⏭]
  - glyph_keyboard: mapped glyphs in rows of 5, cancel last, then one
    block of toggle buttons per selection component
  - paginated_menu_keyboard: the navigation row, then the current
    page's category glyphs in rows of 5
  - check_button_count: fail fast above Telegram's practical limit

Callback data comes from callback_data.py; button labels are the glyphs.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import TypeVar

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from .callback_data import control_data, selection_data
from .config import Emote, config
from .errors import TooManyButtonsError

T = TypeVar("T")

# Most controls a single message may carry (5 rows of 5)
MAX_BUTTONS = 25
ROW_SIZE = 5

SELECTED_MARK = "☑"
UNSELECTED_MARK = "☐"


def chunkify(items: Iterable[T], size: int = ROW_SIZE) -> list[list[T]]:
    """Split items into consecutive rows of at most ``size``."""
    items = list(items)
    return [items[i : i + size] for i in range(0, len(items), size)]


def check_button_count(count: int) -> None:
    if count > MAX_BUTTONS:
        raise TooManyButtonsError(count, MAX_BUTTONS)


def control_button(glyph: str) -> InlineKeyboardButton:
    return InlineKeyboardButton(glyph, callback_data=control_data(glyph))


def pagination_controls(
    *, cancellable: bool, skip: bool = False, fast_forward: bool = False
) -> list[Emote]:
    """The pagination controls to show, in display order."""
    controls: list[Emote] = []
    if fast_forward:
        controls.append(Emote.GOTO_FIRST)
    if skip:
        controls.append(Emote.SKIP_BACKWARD)
    controls.append(Emote.PREVIOUS)
    if cancellable:
        controls.append(Emote.CANCEL)
    controls.append(Emote.NEXT)
    if skip:
        controls.append(Emote.SKIP_FORWARD)
    if fast_forward:
        controls.append(Emote.GOTO_LAST)
    return controls


def pagination_keyboard(controls: Sequence[Emote]) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [[control_button(config.get_emote(emote)) for emote in controls]]
    )


def count_controls(
    glyphs: Sequence[str],
    *,
    cancellable: bool,
    selections: Mapping[str, Sequence[str]] | None = None,
) -> int:
    """Number of buttons glyph_keyboard() would render."""
    count = len(glyphs)
    if cancellable and config.get_emote(Emote.CANCEL) not in glyphs:
        count += 1
    if selections:
        count += sum(len(options) for options in selections.values())
    return count


def glyph_keyboard(
    glyphs: Sequence[str],
    *,
    cancellable: bool,
    selections: Mapping[str, Sequence[str]] | None = None,
    chosen: Mapping[str, Sequence[str]] | None = None,
) -> InlineKeyboardMarkup:
    """Keyboard for menus and button maps.

    Glyphs fill rows of 5 in the given order. The cancel control is appended
    unless it is already one of the glyphs. Selection components follow,
    one block per component, each option labelled with its toggle state.
    """
    check_button_count(
        count_controls(glyphs, cancellable=cancellable, selections=selections)
    )
    cancel = config.get_emote(Emote.CANCEL)
    buttons = [control_button(g) for g in glyphs]
    if cancellable and cancel not in glyphs:
        buttons.append(control_button(cancel))
    rows = chunkify(buttons)

    chosen = chosen or {}
    for component, options in (selections or {}).items():
        picked = set(chosen.get(component, ()))
        toggles = [
            InlineKeyboardButton(
                f"{SELECTED_MARK if option in picked else UNSELECTED_MARK} {option}",
                callback_data=selection_data(component, option),
            )
            for option in options
        ]
        rows.extend(chunkify(toggles))
    return InlineKeyboardMarkup(rows)


def paginated_menu_keyboard(
    controls: Sequence[Emote], glyphs: Sequence[str]
) -> InlineKeyboardMarkup:
    """Navigation row on top, the current page's category glyphs below."""
    check_button_count(len(controls) + len(glyphs))
    navigation = [control_button(config.get_emote(emote)) for emote in controls]
    return InlineKeyboardMarkup(
        [navigation, *chunkify(control_button(g) for g in glyphs)]
    )
