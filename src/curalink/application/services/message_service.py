from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from curalink.application.services.identity_resolver import require_role
from curalink.domain.errors import Forbidden, InvalidRequest
from curalink.domain.identity import Principal, Role
from curalink.infrastructure.stores.connection_store import ConnectionStore
from curalink.infrastructure.stores.message_store import MessageStore

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


class MessageService:
    """Chat between researchers who hold an accepted connection."""

    def __init__(
        self,
        message_store: Optional[MessageStore] = None,
        connection_store: Optional[ConnectionStore] = None,
        *,
        db_url: Optional[str] = None,
    ):
        self._messages = message_store or MessageStore(db_url=db_url)
        self._connections = connection_store or ConnectionStore(db_url=db_url)

    def list_thread(self, principal: Principal, counterpart_id: Optional[int]) -> List[Dict[str, Any]]:
        """Messages with *counterpart_id*, oldest first.

        Side effect: unread messages from the counterpart to the caller are
        marked read, so unread counts drop after this call.
        """
        require_role(principal, Role.RESEARCHER, "Only researchers can access chat")
        if counterpart_id is None:
            raise InvalidRequest("userId is required")
        self._require_connected(principal.user_id, int(counterpart_id))
        return self._messages.read_thread(principal.user_id, int(counterpart_id))

    def send_message(
        self, principal: Principal, receiver_id: Optional[int], body: Optional[str]
    ) -> Dict[str, Any]:
        require_role(principal, Role.RESEARCHER, "Only researchers can send chat messages")
        text = str(body or "").strip()
        if receiver_id is None or not text:
            raise InvalidRequest("receiverId and message are required")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise InvalidRequest(f"message exceeds {MAX_MESSAGE_LENGTH} characters")
        self._require_connected(principal.user_id, int(receiver_id))

        row = self._messages.add_message(principal.user_id, int(receiver_id), text)
        logger.info("Message id=%s sender=%s receiver=%s", row["id"], principal.user_id, receiver_id)
        return row

    def _require_connected(self, user_a: int, user_b: int) -> None:
        if user_a == user_b or not self._connections.is_accepted_between(user_a, user_b):
            raise Forbidden("You must be connected to chat with this user")
