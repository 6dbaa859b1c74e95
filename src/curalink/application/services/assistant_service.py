"""FAQ answering and medical spell correction on top of Gemini.

Both features are optional: a missing key or an upstream failure produces a
fallback payload instead of an exception.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from curalink.application.prompts.assistant import (
    FAQ_PLATFORM_CONTEXT,
    FAQ_USER_TEMPLATE,
    SPELL_CORRECT_TEMPLATE,
)
from curalink.domain.errors import InvalidRequest
from curalink.infrastructure.llm.gemini_client import GeminiClient, GeminiError
from curalink.infrastructure.stores.faq_chat_store import FaqChatStore

logger = logging.getLogger(__name__)

MAX_FAQ_MESSAGE_LENGTH = 2000
MAX_TERM_LENGTH = 200

NOT_CONFIGURED_APOLOGY = (
    "I apologize, but the AI service is not properly configured. Please contact the "
    "administrator or browse the FAQ sections above for answers."
)
_RETRY_HINT = (
    " Please try asking your question again, or browse the FAQ sections above for immediate "
    "answers. You can also contact our support team for help."
)

_BOLD_RE = re.compile(r"\*\*")
_QUOTES_RE = re.compile(r"^[\"']|[\"']$")
_OUTPUT_PREFIX_RE = re.compile(r"^output:\s*", re.IGNORECASE)


@dataclass(frozen=True)
class AssistantReply:
    status_code: int
    payload: Dict[str, Any]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _apology_for(exc: Exception) -> str:
    text = str(exc).lower()
    if "api key" in text or "api_key" in text:
        head = "API key error detected. Please verify the assistant configuration."
    elif "quota" in text or "429" in text:
        head = "The assistant is over its usage quota right now."
    elif "model" in text:
        head = "Model configuration error. The assistant model may need to be updated."
    else:
        head = "I apologize, but I'm having trouble connecting right now."
    return head + _RETRY_HINT


def clean_correction(raw: str) -> str:
    lines = (raw or "").strip().splitlines()
    text = lines[0] if lines else ""
    text = _BOLD_RE.sub("", text).strip()
    text = _OUTPUT_PREFIX_RE.sub("", text)
    text = _QUOTES_RE.sub("", text.strip())
    return text.strip().lower()


class AssistantService:
    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        faq_store: Optional[FaqChatStore] = None,
        *,
        db_url: Optional[str] = None,
    ):
        self._client = client
        self._faq_store = faq_store or FaqChatStore(db_url=db_url)

    @property
    def available(self) -> bool:
        return self._client is not None

    def answer_faq(
        self, *, message: Optional[str], session_id: Optional[str], user_id: Optional[int] = None
    ) -> AssistantReply:
        text = str(message or "").strip()
        if not text:
            raise InvalidRequest("Valid message is required")
        if len(text) > MAX_FAQ_MESSAGE_LENGTH:
            raise InvalidRequest(f"message exceeds {MAX_FAQ_MESSAGE_LENGTH} characters")
        session_id = str(session_id or "").strip()
        if not session_id:
            raise InvalidRequest("Session ID is required")

        if self._client is None:
            logger.warning("FAQ chat requested but GEMINI_API_KEY is not configured")
            return AssistantReply(
                status_code=500,
                payload={"error": "Assistant API key not configured", "response": NOT_CONFIGURED_APOLOGY},
            )

        prompt = FAQ_USER_TEMPLATE.format(context=FAQ_PLATFORM_CONTEXT, message=text)
        try:
            answer = self._client.generate(prompt, max_output_tokens=500, temperature=0.7)
        except GeminiError as exc:
            logger.warning("FAQ chat upstream failure: %s", exc)
            return AssistantReply(
                status_code=200,
                payload={"response": _apology_for(exc), "timestamp": _now_iso(), "error": True},
            )

        answer = _BOLD_RE.sub("", answer).strip()
        try:
            self._faq_store.add_exchange(
                session_id=session_id,
                user_message=text,
                assistant_response=answer,
                user_id=user_id,
            )
        except Exception as exc:
            logger.warning("Failed to persist FAQ exchange session=%s: %s", session_id, exc)

        return AssistantReply(status_code=200, payload={"response": answer, "timestamp": _now_iso()})

    def correct_spelling(self, term: Optional[str]) -> AssistantReply:
        original = str(term or "").strip()
        if not original:
            raise InvalidRequest("Term is required")
        if len(original) > MAX_TERM_LENGTH:
            raise InvalidRequest(f"term exceeds {MAX_TERM_LENGTH} characters")

        if self._client is None:
            return AssistantReply(
                status_code=200,
                payload={
                    "correctedTerm": original,
                    "wasCorrected": False,
                    "message": "Spell correction unavailable",
                },
            )

        try:
            raw = self._client.generate(
                SPELL_CORRECT_TEMPLATE.format(term=original), max_output_tokens=100, temperature=0.1
            )
        except GeminiError as exc:
            logger.warning("Spell correction failed term=%r: %s", original, exc)
            return AssistantReply(
                status_code=500,
                payload={"correctedTerm": original, "wasCorrected": False, "error": "Spell correction failed"},
            )

        corrected = clean_correction(raw) or original.lower()
        was_corrected = corrected != original.lower()
        logger.info("Spell correction %r -> %r changed=%s", original, corrected, was_corrected)
        return AssistantReply(
            status_code=200,
            payload={
                "success": True,
                "originalTerm": original,
                "correctedTerm": corrected,
                "wasCorrected": was_corrected,
            },
        )
