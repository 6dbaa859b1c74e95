from __future__ import annotations

import pytest

from curalink.infrastructure.stores.message_store import MessageStore
from curalink.infrastructure.stores.user_store import UserStore


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def users(db_url):
    store = UserStore(db_url=db_url)
    return [store.create_user(email=f"m{i}@example.com")["id"] for i in range(3)]


@pytest.fixture()
def store(db_url):
    return MessageStore(db_url=db_url, auto_create_schema=True)


class TestMessageStore:
    def test_add_message_is_unread(self, store: MessageStore, users):
        a, b, _ = users
        msg = store.add_message(a, b, "hello")
        assert msg["senderId"] == a
        assert msg["receiverId"] == b
        assert msg["message"] == "hello"
        assert msg["isRead"] is False

    def test_read_thread_orders_and_marks_incoming(self, store: MessageStore, users):
        a, b, _ = users
        store.add_message(a, b, "one")
        store.add_message(b, a, "two")
        store.add_message(b, a, "three")

        first = store.read_thread(a, b)
        assert [m["message"] for m in first] == ["one", "two", "three"]
        # flags as they were before this read
        assert [m["isRead"] for m in first] == [False, False, False]

        second = store.read_thread(a, b)
        assert [m["isRead"] for m in second] == [False, True, True]

    def test_read_thread_excludes_other_pairs(self, store: MessageStore, users):
        a, b, c = users
        store.add_message(a, b, "ab")
        store.add_message(a, c, "ac")
        assert [m["message"] for m in store.read_thread(b, a)] == ["ab"]

    def test_count_unread_is_directional(self, store: MessageStore, users):
        a, b, _ = users
        store.add_message(a, b, "x")
        store.add_message(a, b, "y")
        store.add_message(b, a, "z")
        assert store.count_unread(sender_id=a, receiver_id=b) == 2
        assert store.count_unread(sender_id=b, receiver_id=a) == 1

        store.read_thread(b, a)
        assert store.count_unread(sender_id=a, receiver_id=b) == 0
        assert store.count_unread(sender_id=b, receiver_id=a) == 1

    def test_latest_between(self, store: MessageStore, users):
        a, b, _ = users
        assert store.latest_between(a, b) is None
        store.add_message(a, b, "first")
        last = store.add_message(b, a, "second")
        latest = store.latest_between(a, b)
        assert latest["id"] == last["id"]
        assert latest["message"] == "second"
