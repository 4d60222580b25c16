"""Callback data codec for tgpages inline keyboards.

Every button the library renders carries one of these prefixes so the
router's CallbackQueryHandler only sees its own queries. The owning message
is identified by the query's chat/message ids, never by callback data, so
the payload only names the glyph (or selection) that was pressed.

Constants:
  - CB_CONTROL: control / action button (pu:<glyph>)
  - CB_SELECT: selection toggle (pus:<component>:<value>)
  - CB_NOOP: inert button (counters, spacers)
"""

from dataclasses import dataclass

from .errors import InvalidEmoteError

CB_PREFIX = "pu"
CB_CONTROL = "pu:"  # pu:<glyph>
CB_SELECT = "pus:"  # pus:<component>:<value>
CB_NOOP = "pu-noop"

# Telegram rejects callback_data longer than 64 bytes
MAX_CALLBACK_DATA = 64

# Router pattern: only queries produced by this library
CALLBACK_PATTERN = r"^pu(:|s:|-noop$)"


@dataclass(frozen=True, slots=True)
class ParsedCallback:
    """Decoded callback data."""

    glyph: str = ""
    component: str | None = None  # set for selection toggles
    value: str = ""
    noop: bool = False

    @property
    def is_selection(self) -> bool:
        return self.component is not None


def _check_size(data: str, what: str) -> str:
    size = len(data.encode("utf-8"))
    if size > MAX_CALLBACK_DATA:
        raise InvalidEmoteError(
            f"{what} needs {size} bytes of callback data (limit {MAX_CALLBACK_DATA})"
        )
    return data


def validate_glyph(glyph: str) -> str:
    """Check that a glyph can be used as a control and return it."""
    if not glyph or not glyph.strip():
        raise InvalidEmoteError("Glyph must not be empty")
    _check_size(CB_CONTROL + glyph, f"Glyph {glyph!r}")
    return glyph


def control_data(glyph: str) -> str:
    """Callback data of a control button."""
    return CB_CONTROL + validate_glyph(glyph)


def selection_data(component: str, value: str) -> str:
    """Callback data of a selection toggle."""
    if not component or ":" in component:
        raise InvalidEmoteError(
            f"Selection component {component!r} must be non-empty without ':'"
        )
    return _check_size(
        f"{CB_SELECT}{component}:{value}", f"Selection {component}={value!r}"
    )


def parse_callback_data(data: str | None) -> ParsedCallback | None:
    """Decode callback data; None when it was not produced by this library."""
    if not data:
        return None
    if data == CB_NOOP:
        return ParsedCallback(noop=True)
    if data.startswith(CB_SELECT):
        rest = data[len(CB_SELECT) :]
        component, sep, value = rest.partition(":")
        if not sep or not component:
            return None
        return ParsedCallback(component=component, value=value)
    if data.startswith(CB_CONTROL):
        glyph = data[len(CB_CONTROL) :]
        return ParsedCallback(glyph=glyph) if glyph else None
    return None
