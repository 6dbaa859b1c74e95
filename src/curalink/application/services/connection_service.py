from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from curalink.application.services.identity_resolver import require_role
from curalink.application.services.resend_service import ResendEmailService, deliver_quietly
from curalink.domain.connection import ConnectionAction, ConnectionStatus
from curalink.domain.errors import Conflict, Forbidden, InvalidRequest, NotFound
from curalink.domain.identity import Principal, Role
from curalink.infrastructure.stores.connection_store import ConnectionStore
from curalink.infrastructure.stores.user_store import UserStore

logger = logging.getLogger(__name__)


def _parse_action(action: Optional[str]) -> ConnectionAction:
    try:
        return ConnectionAction(str(action or "").strip().lower())
    except ValueError:
        raise InvalidRequest("Invalid action") from None


class ConnectionService:
    """Researcher-to-researcher connection requests and their approval state."""

    def __init__(
        self,
        connection_store: Optional[ConnectionStore] = None,
        user_store: Optional[UserStore] = None,
        mailer: Optional[ResendEmailService] = None,
        *,
        db_url: Optional[str] = None,
    ):
        self._connections = connection_store or ConnectionStore(db_url=db_url)
        self._users = user_store or UserStore(db_url=db_url)
        self._mailer = mailer

    def list_connections(self, principal: Principal) -> List[Dict[str, Any]]:
        require_role(principal, Role.RESEARCHER, "Only researchers can manage connections")
        rows = self._connections.list_for_user(principal.user_id)
        people = self._users.get_public_many(
            uid for row in rows for uid in (row["requesterId"], row["receiverId"])
        )
        out: List[Dict[str, Any]] = []
        for row in rows:
            item = dict(row)
            item["requester"] = people.get(row["requesterId"])
            item["receiver"] = people.get(row["receiverId"])
            item["isRequester"] = row["requesterId"] == principal.user_id
            out.append(item)
        return out

    def request_connection(self, principal: Principal, receiver_id: Optional[int]) -> Dict[str, Any]:
        require_role(principal, Role.RESEARCHER, "Only researchers can send connection requests")
        if receiver_id is None:
            raise InvalidRequest("receiverId is required")
        receiver_id = int(receiver_id)
        if receiver_id == principal.user_id:
            raise InvalidRequest("Cannot send connection request to yourself")

        receiver = self._users.get_by_id(receiver_id)
        if receiver is None:
            raise NotFound("Receiver not found")

        row, created = self._connections.create_request(principal.user_id, receiver_id)
        if not created:
            raise Conflict("Connection request already exists", extra={"status": row["status"]})

        logger.info(
            "Connection requested id=%s requester=%s receiver=%s",
            row["id"],
            principal.user_id,
            receiver_id,
        )
        if self._mailer is not None:
            deliver_quietly(
                "connection_request",
                self._mailer.send_connection_request,
                to=receiver["email"],
                requester_name=principal.name or principal.email,
            )
        return row

    def respond(
        self, principal: Principal, connection_id: Optional[int], action: Optional[str]
    ) -> Dict[str, Any]:
        """Accept or reject a pending request addressed to the caller.

        Repeating the action that produced the current terminal status returns
        the row unchanged; flipping a terminal status is a Conflict.
        """
        require_role(principal, Role.RESEARCHER, "Only researchers can manage connections")
        parsed = _parse_action(action)
        if connection_id is None:
            raise InvalidRequest("connectionId and action are required")
        row = self._connections.get(int(connection_id))
        if row is None:
            raise NotFound("Connection not found")
        if row["receiverId"] != principal.user_id:
            raise Forbidden("You can only respond to requests sent to you")

        target = parsed.target_status
        if row["status"] == ConnectionStatus.PENDING.value:
            updated = self._connections.transition(
                connection_id, from_status=ConnectionStatus.PENDING, to_status=target
            )
            if updated is not None:
                logger.info("Connection id=%s -> %s", connection_id, target.value)
                return updated
            # Lost a race with another response; judge against the stored state.
            row = self._connections.get(connection_id) or row

        if row["status"] == target.value:
            return row
        raise Conflict(f"Connection already {row['status']}", extra={"status": row["status"]})
