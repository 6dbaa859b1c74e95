from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from curalink.api.dependencies import MAX_ROW_ID, current_principal
from curalink.application.services.notification_service import NotificationService
from curalink.domain.identity import Principal

router = APIRouter()

_notification_service = NotificationService()


class NotificationCreateRequest(BaseModel):
    type: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    link: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


@router.get("/notifications")
def list_notifications(principal: Principal = Depends(current_principal)):
    return _notification_service.feed(principal)


@router.post("/notifications")
def add_notification(req: NotificationCreateRequest, principal: Principal = Depends(current_principal)):
    notification = _notification_service.add(
        principal,
        type=req.type or "",
        title=req.title or "",
        message=req.message or "",
        link=req.link,
        metadata=req.metadata,
    )
    return {"notification": notification}


@router.delete("/notifications")
def clear_notifications(principal: Principal = Depends(current_principal)):
    return {"ok": True, "cleared": _notification_service.clear(principal)}


@router.post("/notifications/read-all")
def mark_all_read(principal: Principal = Depends(current_principal)):
    return {"ok": True, "updated": _notification_service.mark_all_read(principal)}


@router.patch("/notifications/{notification_id}/read")
def mark_read(
    notification_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    principal: Principal = Depends(current_principal),
):
    _notification_service.mark_read(principal, notification_id)
    return {"ok": True}


@router.delete("/notifications/{notification_id}")
def delete_notification(
    notification_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    principal: Principal = Depends(current_principal),
):
    _notification_service.delete(principal, notification_id)
    return {"ok": True}
