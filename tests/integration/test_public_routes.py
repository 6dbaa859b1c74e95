from __future__ import annotations

import curalink.api.routes.external_data as external_data_module
from curalink.application.services.external_data_service import ExternalDataService


class _FakeTrials:
    def __init__(self):
        self.calls = []

    def search(self, conditions, *, location=None, max_results=10):
        self.calls.append((list(conditions), location, max_results))
        return [{"id": "NCT1", "title": "A trial"}]


class _FakePubMed:
    def search(self, terms, *, max_results=10):
        raise ValueError("bad json")


def test_health(api):
    response = api.client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Trace-Id"].startswith("req-")


def test_trace_id_is_echoed(api):
    response = api.client.get("/health", headers={"X-Trace-Id": "trace-123"})
    assert response.headers["X-Trace-Id"] == "trace-123"


def test_clinical_trials_route(api, monkeypatch):
    trials = _FakeTrials()
    monkeypatch.setattr(
        external_data_module, "_external_data_service", ExternalDataService(pubmed=_FakePubMed(), trials=trials)
    )
    response = api.client.get(
        "/api/external-data/clinical-trials?conditions=asthma,%20lupus&location=Boston&maxResults=5"
    )
    assert response.status_code == 200
    assert response.json() == {"trials": [{"id": "NCT1", "title": "A trial"}], "count": 1}
    terms, location, max_results = trials.calls[0]
    assert "asthma" in terms and "lupus" in terms
    assert location == "Boston"
    assert max_results == 5


def test_publications_route_degrades_to_empty(api, monkeypatch):
    monkeypatch.setattr(
        external_data_module,
        "_external_data_service",
        ExternalDataService(pubmed=_FakePubMed(), trials=_FakeTrials()),
    )
    response = api.client.get("/api/external-data/publications?conditions=cancer")
    assert response.status_code == 200
    assert response.json() == {"publications": [], "count": 0}


def test_faq_chat_without_key(api):
    response = api.client.post("/api/faq-chat", json={"message": "What is CuraLink?", "sessionId": "s1"})
    assert response.status_code == 500
    assert "response" in response.json()

    invalid = api.client.post("/api/faq-chat", json={"message": "", "sessionId": "s1"})
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "Valid message is required"}


def test_spell_correct_without_key(api):
    response = api.client.post("/api/spell-correct", json={"term": "diabtes"})
    assert response.status_code == 200
    assert response.json()["correctedTerm"] == "diabtes"
    assert response.json()["wasCorrected"] is False
    assert api.client.post("/api/spell-correct", json={}).status_code == 400
