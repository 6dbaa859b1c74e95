from __future__ import annotations

from typing import Any, Dict, Optional

from curalink.domain.errors import InvalidRequest, NotFound
from curalink.domain.identity import Principal
from curalink.domain.notification import NotificationType
from curalink.infrastructure.stores.notification_store import NotificationStore


class NotificationService:
    def __init__(
        self, notification_store: Optional[NotificationStore] = None, *, db_url: Optional[str] = None
    ):
        self._store = notification_store or NotificationStore(db_url=db_url)

    def feed(self, principal: Principal) -> Dict[str, Any]:
        items = self._store.list_for_user(principal.user_id)
        return {
            "notifications": items,
            "unreadCount": sum(1 for n in items if not n["read"]),
        }

    def add(
        self,
        principal: Principal,
        *,
        type: str,
        title: str,
        message: str,
        link: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            parsed = NotificationType(str(type or "").strip())
        except ValueError:
            raise InvalidRequest(f"Unknown notification type: {type}") from None
        if not str(title or "").strip():
            raise InvalidRequest("title is required")
        return self._store.add(
            principal.user_id,
            type=parsed,
            title=title.strip(),
            message=str(message or ""),
            link=link,
            metadata=metadata,
        )

    def mark_read(self, principal: Principal, notification_id: int) -> None:
        if not self._store.mark_read(principal.user_id, notification_id):
            raise NotFound("Notification not found")

    def mark_all_read(self, principal: Principal) -> int:
        return self._store.mark_all_read(principal.user_id)

    def delete(self, principal: Principal, notification_id: int) -> bool:
        return self._store.delete(principal.user_id, notification_id)

    def clear(self, principal: Principal) -> int:
        return self._store.clear(principal.user_id)
