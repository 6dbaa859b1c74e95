"""Conversation list: one entry per accepted counterpart, most recent chat first."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from curalink.application.services.identity_resolver import require_role
from curalink.domain.connection import ConnectionStatus
from curalink.domain.identity import Principal, Role
from curalink.infrastructure.stores.connection_store import ConnectionStore
from curalink.infrastructure.stores.message_store import MessageStore
from curalink.infrastructure.stores.user_store import UserStore


def _recency_key(entry: Dict[str, Any]) -> Tuple[datetime, int]:
    latest = entry["latestMessage"]
    return (datetime.fromisoformat(latest["createdAt"]), latest["id"])


class ConversationService:
    def __init__(
        self,
        connection_store: Optional[ConnectionStore] = None,
        message_store: Optional[MessageStore] = None,
        user_store: Optional[UserStore] = None,
        *,
        db_url: Optional[str] = None,
    ):
        self._connections = connection_store or ConnectionStore(db_url=db_url)
        self._messages = message_store or MessageStore(db_url=db_url)
        self._users = user_store or UserStore(db_url=db_url)

    def list_conversations(self, principal: Principal) -> List[Dict[str, Any]]:
        require_role(principal, Role.RESEARCHER, "Only researchers can access chat")
        me = principal.user_id
        accepted = self._connections.list_for_user(me, status=ConnectionStatus.ACCEPTED)

        counterpart_ids: List[int] = []
        for conn in accepted:
            other = conn["receiverId"] if conn["requesterId"] == me else conn["requesterId"]
            if other not in counterpart_ids:
                counterpart_ids.append(other)
        people = self._users.get_public_many(counterpart_ids)

        with_messages: List[Dict[str, Any]] = []
        without_messages: List[Dict[str, Any]] = []
        for other in counterpart_ids:
            entry = {
                "userId": other,
                "user": people.get(other) or {"id": other, "name": None, "email": None, "image": None},
                "latestMessage": self._messages.latest_between(me, other),
                "unreadCount": self._messages.count_unread(sender_id=other, receiver_id=me),
            }
            (with_messages if entry["latestMessage"] else without_messages).append(entry)

        with_messages.sort(key=_recency_key, reverse=True)
        return with_messages + without_messages
