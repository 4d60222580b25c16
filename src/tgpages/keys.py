"""Event key derivation.

Every interactive message is addressed by a short opaque key computed from
(group context, chat id, message id). Group and private chats hash under
different prefixes so equal ids in the two contexts never share a key.

The digest is 64-bit BLAKE2b. Keys only live in process memory, so the
algorithm is free to change between releases.
"""

import hashlib
from typing import Any

from telegram.constants import ChatType

_GROUP_PREFIX = "GROUP_"
_PRIVATE_PREFIX = "PRIVATE_"


def compute_key(is_group: bool, chat_id: int | str, message_id: int | str) -> str:
    """Return the event key for a message."""
    prefix = _GROUP_PREFIX if is_group else _PRIVATE_PREFIX
    raw = f"{prefix}{chat_id}_{message_id}"
    return hashlib.blake2b(raw.encode("utf-8"), digest_size=8).hexdigest()


def is_group_chat(chat: Any) -> bool:
    """Anything but a one-to-one chat counts as a group context."""
    return getattr(chat, "type", ChatType.PRIVATE) != ChatType.PRIVATE


def key_for(message: Any) -> str:
    """Compute the key of a PTB message or a MessageRef."""
    from .models import MessageRef

    return MessageRef.of(message).key
