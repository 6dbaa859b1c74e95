from __future__ import annotations

from curalink.infrastructure.connectors.pubmed_connector import PubMedConnector


class _DummyResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self):
        return self._payload


def test_search_runs_esearch_then_esummary(monkeypatch):
    calls = []

    def _fake_get(url, headers, params=None, timeout=0):
        calls.append({"url": url, "params": params})
        if url.endswith("/esearch.fcgi"):
            return _DummyResponse({"esearchresult": {"idlist": ["111", "222"]}})
        return _DummyResponse(
            {
                "result": {
                    "uids": ["111", "222"],
                    "111": {
                        "title": "Insulin resistance in adolescents",
                        "pubdate": "2021 Mar 4",
                        "authors": [{"name": "Smith J"}, {"name": "Doe A"}],
                        "fulljournalname": "Diabetes Care",
                    },
                    "222": {"title": "", "pubdate": "", "source": "Lancet"},
                }
            }
        )

    monkeypatch.setattr(
        "curalink.infrastructure.connectors.pubmed_connector.requests.get", _fake_get
    )

    articles = PubMedConnector().search(["diabetes", "insulin resistance"], max_results=5)
    assert calls[0]["params"]["term"] == "diabetes OR insulin resistance"
    assert calls[0]["params"]["retmax"] == 5
    assert calls[0]["params"]["sort"] == "relevance"
    assert calls[1]["params"]["id"] == "111,222"

    first, second = articles
    assert first == {
        "id": "pmid-111",
        "title": "Insulin resistance in adolescents",
        "year": 2021,
        "authors": ["Smith J", "Doe A"],
        "journal": "Diabetes Care",
        "url": "https://pubmed.ncbi.nlm.nih.gov/111/",
    }
    assert second["title"] == "Untitled"
    assert second["year"] is None
    assert second["journal"] == "Lancet"


def test_empty_terms_make_no_request(monkeypatch):
    def _fail(*args, **kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr("curalink.infrastructure.connectors.pubmed_connector.requests.get", _fail)
    assert PubMedConnector().search([]) == []


def test_no_ids_skips_summary(monkeypatch):
    calls = []

    def _fake_get(url, headers, params=None, timeout=0):
        calls.append(url)
        return _DummyResponse({"esearchresult": {"idlist": []}})

    monkeypatch.setattr(
        "curalink.infrastructure.connectors.pubmed_connector.requests.get", _fake_get
    )
    assert PubMedConnector().search(["nothing"]) == []
    assert len(calls) == 1
