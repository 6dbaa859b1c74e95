from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from curalink.api.dependencies import optional_principal
from curalink.application.services.assistant_service import AssistantService
from curalink.domain.identity import Principal
from curalink.infrastructure.llm.gemini_client import GeminiClient
from curalink.utils.logging_config import LogFiles, Logger

router = APIRouter()

_assistant_service = AssistantService(GeminiClient.from_env())


class FaqChatRequest(BaseModel):
    message: Optional[str] = None
    sessionId: Optional[str] = None


class SpellCorrectRequest(BaseModel):
    term: Optional[str] = None


@router.post("/faq-chat")
def faq_chat(req: FaqChatRequest, principal: Optional[Principal] = Depends(optional_principal)):
    reply = _assistant_service.answer_faq(
        message=req.message,
        session_id=req.sessionId,
        user_id=principal.user_id if principal else None,
    )
    Logger.info(f"FAQ chat session={req.sessionId} status={reply.status_code}", file=LogFiles.ASSISTANT)
    return JSONResponse(status_code=reply.status_code, content=reply.payload)


@router.post("/spell-correct")
def spell_correct(req: SpellCorrectRequest):
    reply = _assistant_service.correct_spelling(req.term)
    return JSONResponse(status_code=reply.status_code, content=reply.payload)
