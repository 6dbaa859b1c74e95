from __future__ import annotations

import pytest
import requests

from curalink.application.services.assistant_service import AssistantService, clean_correction
from curalink.domain.errors import InvalidRequest
from curalink.infrastructure.llm.gemini_client import GeminiClient, GeminiError
from curalink.infrastructure.stores.faq_chat_store import FaqChatStore


class _DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


class _FakeClient:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, *, max_output_tokens=500, temperature=0.7):
        self.calls.append({"prompt": prompt, "max": max_output_tokens, "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def faq_store(tmp_path):
    return FaqChatStore(db_url=f"sqlite:///{tmp_path / 'test.db'}")


class TestGeminiClient:
    def test_from_env_without_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert GeminiClient.from_env() is None

    def test_from_env_reads_model(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("CURALINK_GEMINI_MODEL", "gemini-pro")
        client = GeminiClient.from_env()
        assert client.api_key == "k"
        assert client.model == "gemini-pro"

    def test_generate_extracts_text(self, monkeypatch):
        captured = {}

        def _fake_post(url, params=None, json=None, timeout=0):
            captured.update(url=url, params=params, body=json)
            return _DummyResponse(
                {"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "there"}]}}]}
            )

        monkeypatch.setattr("curalink.infrastructure.llm.gemini_client.requests.post", _fake_post)
        text = GeminiClient("key", model="m").generate("hi", max_output_tokens=10, temperature=0.1)
        assert text == "Hello there"
        assert captured["url"].endswith("/models/m:generateContent")
        assert captured["params"] == {"key": "key"}
        assert captured["body"]["generationConfig"] == {"maxOutputTokens": 10, "temperature": 0.1}

    def test_http_error_becomes_gemini_error(self, monkeypatch):
        monkeypatch.setattr(
            "curalink.infrastructure.llm.gemini_client.requests.post",
            lambda url, params=None, json=None, timeout=0: _DummyResponse({"error": "quota"}, 429),
        )
        with pytest.raises(GeminiError):
            GeminiClient("key").generate("hi")

    def test_blocked_prompt_is_error(self, monkeypatch):
        monkeypatch.setattr(
            "curalink.infrastructure.llm.gemini_client.requests.post",
            lambda url, params=None, json=None, timeout=0: _DummyResponse(
                {"promptFeedback": {"blockReason": "SAFETY"}}
            ),
        )
        with pytest.raises(GeminiError, match="SAFETY"):
            GeminiClient("key").generate("hi")


class TestFaqChat:
    def test_validation(self, faq_store):
        service = AssistantService(_FakeClient("x"), faq_store)
        with pytest.raises(InvalidRequest):
            service.answer_faq(message="  ", session_id="s1")
        with pytest.raises(InvalidRequest):
            service.answer_faq(message="hello", session_id=None)

    def test_missing_key_is_500_with_apology(self, faq_store):
        reply = AssistantService(None, faq_store).answer_faq(message="hello", session_id="s1")
        assert reply.status_code == 500
        assert reply.payload["error"]
        assert reply.payload["response"].startswith("I apologize")

    def test_success_strips_bold_and_persists(self, faq_store):
        client = _FakeClient("**CuraLink** helps you find trials.")
        reply = AssistantService(client, faq_store).answer_faq(
            message="What is CuraLink?", session_id="s1"
        )
        assert reply.status_code == 200
        assert reply.payload["response"] == "CuraLink helps you find trials."
        assert "timestamp" in reply.payload
        assert "What is CuraLink?" in client.calls[0]["prompt"]
        assert client.calls[0]["temperature"] == 0.7

        history = faq_store.list_session("s1")
        assert len(history) == 1
        assert history[0]["assistant_response"] == "CuraLink helps you find trials."

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("invalid API key provided", "API key error"),
            ("429 quota exceeded", "quota"),
            ("model not found", "Model configuration error"),
            ("connection reset", "having trouble connecting"),
        ],
    )
    def test_upstream_failure_is_soft(self, faq_store, message, expected):
        service = AssistantService(_FakeClient(error=GeminiError(message)), faq_store)
        reply = service.answer_faq(message="hello", session_id="s1")
        assert reply.status_code == 200
        assert reply.payload["error"] is True
        assert expected in reply.payload["response"]
        assert faq_store.list_session("s1") == []


class TestSpellCorrect:
    def test_blank_term(self, faq_store):
        with pytest.raises(InvalidRequest):
            AssistantService(None, faq_store).correct_spelling(" ")

    def test_unavailable_without_key(self, faq_store):
        reply = AssistantService(None, faq_store).correct_spelling("diabtes")
        assert reply.status_code == 200
        assert reply.payload == {
            "correctedTerm": "diabtes",
            "wasCorrected": False,
            "message": "Spell correction unavailable",
        }

    def test_corrects_and_cleans(self, faq_store):
        client = _FakeClient('Output: "Diabetes"\nextra commentary')
        reply = AssistantService(client, faq_store).correct_spelling("diabtes")
        assert reply.payload == {
            "success": True,
            "originalTerm": "diabtes",
            "correctedTerm": "diabetes",
            "wasCorrected": True,
        }
        assert client.calls[0]["temperature"] == 0.1
        assert client.calls[0]["max"] == 100

    def test_unchanged_term_not_flagged(self, faq_store):
        reply = AssistantService(_FakeClient("asthma"), faq_store).correct_spelling("Asthma")
        assert reply.payload["correctedTerm"] == "asthma"
        assert reply.payload["wasCorrected"] is False

    def test_upstream_failure_returns_original(self, faq_store):
        service = AssistantService(_FakeClient(error=GeminiError("boom")), faq_store)
        reply = service.correct_spelling("cancr")
        assert reply.status_code == 500
        assert reply.payload["correctedTerm"] == "cancr"
        assert reply.payload["wasCorrected"] is False


def test_clean_correction():
    assert clean_correction("**Alzheimer**") == "alzheimer"
    assert clean_correction("'parkinson'") == "parkinson"
    assert clean_correction("") == ""
