from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from curalink.api.dependencies import MAX_ROW_ID, current_principal
from curalink.application.services.connection_service import ConnectionService
from curalink.application.services.resend_service import ResendEmailService
from curalink.domain.identity import Principal
from curalink.utils.logging_config import LogFiles, Logger

router = APIRouter()

_connection_service = ConnectionService(mailer=ResendEmailService.from_env())


class ConnectionCreateRequest(BaseModel):
    receiverId: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)


class ConnectionRespondRequest(BaseModel):
    connectionId: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)
    action: Optional[str] = None


@router.get("/connections")
def list_connections(principal: Principal = Depends(current_principal)):
    return {"success": True, "connections": _connection_service.list_connections(principal)}


@router.post("/connections")
def request_connection(req: ConnectionCreateRequest, principal: Principal = Depends(current_principal)):
    connection = _connection_service.request_connection(principal, req.receiverId)
    Logger.info(
        f"Connection {connection['id']} requested by user {principal.user_id}",
        file=LogFiles.CONNECTIONS,
    )
    return {"success": True, "connection": connection}


@router.patch("/connections")
def respond_to_connection(
    req: ConnectionRespondRequest, principal: Principal = Depends(current_principal)
):
    connection = _connection_service.respond(principal, req.connectionId, req.action)
    Logger.info(
        f"Connection {connection['id']} is {connection['status']} (user {principal.user_id})",
        file=LogFiles.CONNECTIONS,
    )
    return {"success": True, "connection": connection}
