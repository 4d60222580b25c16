"""Value types shared by the router and the controllers.

  - MessageRef: the (chat, message, context) triple an interactive message
    is addressed by, with its event key.
  - Embed / EmbedField: a rich content block rendered as Markdown.
  - Page: tagged union of text, one embed, or a cluster of 1-9 embeds.
  - InteractivityOptions: per-controller settings (cancel, expiry, user
    filter, on-close hook, buttons vs reactions).
  - InteractionContext: what the router hands to a callback.
"""

import dataclasses
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from telegram import User

from .errors import InvalidOptionsError, InvalidPageError
from .keys import compute_key, is_group_chat

if TYPE_CHECKING:
    from telegram import CallbackQuery

# Telegram message text limit
MAX_TEXT_LENGTH = 4096

# Bounds of an embed cluster
MIN_CLUSTER_SIZE = 1
MAX_CLUSTER_SIZE = 9


@dataclass(frozen=True, slots=True)
class MessageRef:
    """Identity of a sent message, enough to edit it and compute its key."""

    chat_id: int
    message_id: int
    is_group: bool = False

    @property
    def key(self) -> str:
        return compute_key(self.is_group, self.chat_id, self.message_id)

    @classmethod
    def of(cls, message: Any) -> "MessageRef":
        """Build from a PTB Message / MaybeInaccessibleMessage or a MessageRef."""
        if isinstance(message, MessageRef):
            return message
        chat = message.chat
        return cls(
            chat_id=chat.id,
            message_id=message.message_id,
            is_group=is_group_chat(chat),
        )


# ── Page content ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class EmbedField:
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class Embed:
    """A rich content block: title, body, key/value fields and a footer."""

    title: str = ""
    description: str = ""
    url: str | None = None
    fields: tuple[EmbedField, ...] = ()
    footer: str = ""

    def __post_init__(self) -> None:
        if not (self.title or self.description or self.fields or self.footer):
            raise InvalidPageError("Embed must have at least one non-empty part")
        # Accept lists / (name, value) pairs for convenience
        normalized = tuple(
            f if isinstance(f, EmbedField) else EmbedField(*f) for f in self.fields
        )
        object.__setattr__(self, "fields", normalized)

    def to_markdown(self) -> str:
        from .markdown_v2 import escape_markdown

        lines: list[str] = []
        if self.title:
            title = escape_markdown(self.title)
            lines.append(f"**[{title}]({self.url})**" if self.url else f"**{title}**")
        if self.description:
            lines.append(self.description)
        for f in self.fields:
            lines.append(f"**{escape_markdown(f.name)}:** {f.value}")
        if self.footer:
            lines.append(f"_{escape_markdown(self.footer)}_")
        return "\n\n".join(lines)


class PageKind(Enum):
    TEXT = "text"
    EMBED = "embed"
    CLUSTER = "cluster"


PageContent = str | Embed | tuple[Embed, ...]

_CLUSTER_SEPARATOR = "\n\n───────────\n\n"


@dataclass(frozen=True, slots=True)
class Page:
    """Immutable page content, validated at construction.

    Use the ``text``, ``embed``, ``cluster`` or ``of`` constructors rather
    than building the union by hand.
    """

    kind: PageKind
    content: PageContent

    def __post_init__(self) -> None:
        if self.kind is PageKind.TEXT:
            if not isinstance(self.content, str):
                raise InvalidPageError("Text page content must be a str")
            if not self.content.strip():
                raise InvalidPageError("Text page must not be empty")
            if len(self.content) > MAX_TEXT_LENGTH:
                raise InvalidPageError(
                    f"Text page is {len(self.content)} chars "
                    f"(limit {MAX_TEXT_LENGTH})"
                )
        elif self.kind is PageKind.EMBED:
            if not isinstance(self.content, Embed):
                raise InvalidPageError("Embed page content must be an Embed")
        elif self.kind is PageKind.CLUSTER:
            if not isinstance(self.content, tuple) or not all(
                isinstance(e, Embed) for e in self.content
            ):
                raise InvalidPageError("Cluster page content must be Embeds")
            if not MIN_CLUSTER_SIZE <= len(self.content) <= MAX_CLUSTER_SIZE:
                raise InvalidPageError(
                    f"Cluster holds {MIN_CLUSTER_SIZE}-{MAX_CLUSTER_SIZE} embeds, "
                    f"got {len(self.content)}"
                )
        else:
            raise InvalidPageError(f"Unknown page kind {self.kind!r}")

    @classmethod
    def text(cls, content: str) -> "Page":
        return cls(PageKind.TEXT, content)

    @classmethod
    def embed(cls, content: Embed) -> "Page":
        return cls(PageKind.EMBED, content)

    @classmethod
    def cluster(cls, embeds: Iterable[Embed]) -> "Page":
        return cls(PageKind.CLUSTER, tuple(embeds))

    @classmethod
    def of(cls, content: Any) -> "Page":
        """Wrap str, Embed, or a sequence of Embeds; pass Pages through."""
        if isinstance(content, Page):
            return content
        if isinstance(content, str):
            return cls.text(content)
        if isinstance(content, Embed):
            return cls.embed(content)
        if isinstance(content, (list, tuple)):
            return cls.cluster(content)
        raise InvalidPageError(
            f"Page content must be str, Embed or a list of Embeds, "
            f"not {type(content).__name__}"
        )

    def to_markdown(self) -> str:
        """Render the page as standard Markdown."""
        if self.kind is PageKind.TEXT:
            assert isinstance(self.content, str)
            return self.content
        if self.kind is PageKind.EMBED:
            assert isinstance(self.content, Embed)
            return self.content.to_markdown()
        if self.kind is PageKind.CLUSTER:
            assert isinstance(self.content, tuple)
            return _CLUSTER_SEPARATOR.join(e.to_markdown() for e in self.content)
        raise InvalidPageError(f"Unknown page kind {self.kind!r}")


# ── Controller options ───────────────────────────────────────────────────


class ExpiryPolicy(str, Enum):
    """When the idle-expiry timer restarts."""

    RESCHEDULE_ON_ACTIVITY = "reschedule"  # every handled interaction
    FIXED_DEADLINE = "fixed"  # armed once on attach


OnClose = Callable[[MessageRef], Awaitable[None] | None]
UserFilter = Callable[[User], bool]


@dataclass(frozen=True, slots=True)
class InteractivityOptions:
    """Settings shared by every controller type.

    Instances are immutable; the ``with_*`` builders return updated copies::

        opts = InteractivityOptions().with_timeout(60).with_on_close(done)
    """

    cancellable: bool = True
    timeout: float = 0.0  # seconds; 0 = never expires
    expiry: ExpiryPolicy = ExpiryPolicy.RESCHEDULE_ON_ACTIVITY
    can_interact: UserFilter | None = None
    on_close: OnClose | None = None
    use_buttons: bool = True

    def __post_init__(self) -> None:
        if self.timeout < 0:
            raise InvalidOptionsError(f"timeout must be >= 0, got {self.timeout}")

    def with_cancellable(self, cancellable: bool = True) -> "InteractivityOptions":
        return dataclasses.replace(self, cancellable=cancellable)

    def with_timeout(
        self, seconds: float, expiry: ExpiryPolicy | None = None
    ) -> "InteractivityOptions":
        return dataclasses.replace(
            self, timeout=seconds, expiry=expiry or self.expiry
        )

    def with_user_filter(
        self, can_interact: UserFilter | None
    ) -> "InteractivityOptions":
        return dataclasses.replace(self, can_interact=can_interact)

    def with_on_close(self, on_close: OnClose | None) -> "InteractivityOptions":
        return dataclasses.replace(self, on_close=on_close)

    def with_reactions(self) -> "InteractivityOptions":
        return dataclasses.replace(self, use_buttons=False)

    def with_buttons(self) -> "InteractivityOptions":
        return dataclasses.replace(self, use_buttons=True)

    def allows(self, user: User) -> bool:
        return self.can_interact is None or bool(self.can_interact(user))


# ── Router → callback ────────────────────────────────────────────────────


class EventKind(str, Enum):
    BUTTON = "button"
    REACTION_ADDED = "reaction_added"
    REACTION_REMOVED = "reaction_removed"
    SELECTION = "selection"


@dataclass(frozen=True, slots=True)
class InteractionContext:
    """One inbound interaction, as delivered to a registered callback."""

    key: str
    kind: EventKind
    message: MessageRef
    user: User
    glyph: str = ""
    query: "CallbackQuery | None" = field(default=None, repr=False)
    component: str | None = None
    values: tuple[str, ...] = ()


Callback = Callable[[User, InteractionContext], Awaitable[None]]
