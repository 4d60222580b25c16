"""Tests for event key derivation."""

from telegram import Chat

from tgpages.keys import compute_key, is_group_chat, key_for
from tgpages.models import MessageRef


class TestComputeKey:
    def test_deterministic(self) -> None:
        assert compute_key(True, 100, 42) == compute_key(True, 100, 42)

    def test_short_hex(self) -> None:
        key = compute_key(False, 100, 42)
        assert len(key) == 16
        int(key, 16)

    def test_context_disjoint(self) -> None:
        assert compute_key(True, 100, 42) != compute_key(False, 100, 42)

    def test_no_collisions_across_contexts(self) -> None:
        group = {compute_key(True, 100 + i, i) for i in range(10_000)}
        private = {compute_key(False, 100 + i, i) for i in range(10_000)}
        assert len(group) == 10_000
        assert len(private) == 10_000
        assert group.isdisjoint(private)

    def test_ids_as_strings(self) -> None:
        assert compute_key(False, "100", "42") == compute_key(False, 100, 42)


class TestKeyFor:
    def test_private_message(self, make_message) -> None:
        msg = make_message(7)
        assert key_for(msg) == compute_key(False, msg.chat.id, 7)

    def test_group_message(self, make_message) -> None:
        msg = make_message(7, group=True)
        assert key_for(msg) == compute_key(True, msg.chat.id, 7)

    def test_message_ref_passthrough(self) -> None:
        ref = MessageRef(chat_id=5, message_id=6, is_group=True)
        assert key_for(ref) == ref.key == compute_key(True, 5, 6)

    def test_is_group_chat(self) -> None:
        assert is_group_chat(Chat(id=1, type=Chat.GROUP))
        assert is_group_chat(Chat(id=1, type=Chat.CHANNEL))
        assert not is_group_chat(Chat(id=1, type=Chat.PRIVATE))
