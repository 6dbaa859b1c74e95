from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from curalink.api.dependencies import MAX_ROW_ID, current_principal
from curalink.application.services.conversation_service import ConversationService
from curalink.application.services.message_service import MessageService
from curalink.domain.identity import Principal
from curalink.utils.logging_config import LogFiles, Logger

router = APIRouter()

_message_service = MessageService()
_conversation_service = ConversationService()


class SendMessageRequest(BaseModel):
    receiverId: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)
    message: Optional[str] = None


@router.get("/chat")
def list_thread(
    userId: Optional[int] = Query(None, ge=1, le=MAX_ROW_ID),
    principal: Principal = Depends(current_principal),
):
    messages = _message_service.list_thread(principal, userId)
    return {"success": True, "messages": messages}


@router.post("/chat")
def send_message(req: SendMessageRequest, principal: Principal = Depends(current_principal)):
    message = _message_service.send_message(principal, req.receiverId, req.message)
    Logger.info(
        f"Message {message['id']} from user {principal.user_id} to user {message['receiverId']}",
        file=LogFiles.CHAT,
    )
    return {"success": True, "message": message}


@router.put("/chat")
def list_conversations(principal: Principal = Depends(current_principal)):
    return {"success": True, "conversations": _conversation_service.list_conversations(principal)}
