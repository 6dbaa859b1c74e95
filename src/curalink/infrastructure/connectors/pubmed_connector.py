from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

import requests

_YEAR_RE = re.compile(r"(\d{4})")


class PubMedConnector:
    """NCBI E-utilities search: esearch for ids, then esummary for article metadata."""

    def __init__(
        self,
        *,
        timeout_s: float = 20.0,
        base_url: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils",
        api_key: Optional[str] = None,
    ):
        self.timeout_s = timeout_s
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._headers = {"User-Agent": "CuraLink/1.0"}

    def search_ids(self, query: str, *, max_results: int = 10) -> List[str]:
        params: Dict[str, Any] = {
            "db": "pubmed",
            "term": query,
            "retmax": max(1, int(max_results)),
            "retmode": "json",
            "sort": "relevance",
        }
        if self.api_key:
            params["api_key"] = self.api_key
        response = requests.get(
            f"{self.base_url}/esearch.fcgi",
            headers=self._headers,
            params=params,
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            return []
        ids = (payload.get("esearchresult") or {}).get("idlist") or []
        return [str(x) for x in ids if str(x).strip()]

    def fetch_summaries(self, ids: Sequence[str]) -> List[Dict[str, Any]]:
        if not ids:
            return []
        params: Dict[str, Any] = {"db": "pubmed", "id": ",".join(ids), "retmode": "json"}
        if self.api_key:
            params["api_key"] = self.api_key
        response = requests.get(
            f"{self.base_url}/esummary.fcgi",
            headers=self._headers,
            params=params,
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        payload = response.json()
        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, dict):
            return []

        articles: List[Dict[str, Any]] = []
        for pmid in ids:
            item = result.get(pmid)
            if isinstance(item, dict):
                articles.append(self._to_article(pmid, item))
        return articles

    def search(self, terms: Sequence[str], *, max_results: int = 10) -> List[Dict[str, Any]]:
        query = " OR ".join(t for t in terms if t)
        if not query:
            return []
        return self.fetch_summaries(self.search_ids(query, max_results=max_results))

    @staticmethod
    def _to_article(pmid: str, item: Dict[str, Any]) -> Dict[str, Any]:
        match = _YEAR_RE.search(str(item.get("pubdate") or ""))
        authors = [
            str(a.get("name")).strip()
            for a in item.get("authors") or []
            if isinstance(a, dict) and a.get("name")
        ]
        return {
            "id": f"pmid-{pmid}",
            "title": str(item.get("title") or "").strip() or "Untitled",
            "year": int(match.group(1)) if match else None,
            "authors": authors,
            "journal": item.get("fulljournalname") or item.get("source") or "Unknown Journal",
            "url": f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
        }
