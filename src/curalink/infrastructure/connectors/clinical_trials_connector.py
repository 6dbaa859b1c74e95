from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import requests


def _phase_label(phases: Sequence[str]) -> str:
    if not phases:
        return "Not Specified"
    first = str(phases[0])
    for digit, label in (("1", "Phase I"), ("2", "Phase II"), ("3", "Phase III"), ("4", "Phase IV")):
        if digit in first:
            return label
    return "Not Specified"


def _status_label(overall_status: str) -> str:
    lowered = (overall_status or "").lower()
    if "recruit" in lowered and "not" not in lowered:
        return "Recruiting"
    if "completed" in lowered:
        return "Completed"
    if "not" in lowered:
        return "Not Recruiting"
    return "Active"


def _loc_matches(loc: Dict[str, Any], needle: str) -> bool:
    for key in ("city", "country", "state"):
        value = str(loc.get(key) or "").lower()
        if value and (needle in value or value in needle):
            return True
    return False


def _location_rank(trial: Dict[str, Any], needle: str) -> int:
    city = str(trial.get("city") or "").lower()
    country = str(trial.get("country") or "").lower()
    if city and city == needle:
        return 0
    if city and (needle in city or city in needle):
        return 1
    if country and (needle in country or country in needle):
        return 2
    return 3


class ClinicalTrialsConnector:
    """ClinicalTrials.gov v2 study search, flattened to CuraLink trial cards."""

    def __init__(self, *, timeout_s: float = 20.0, base_url: str = "https://clinicaltrials.gov"):
        self.timeout_s = timeout_s
        self.base_url = base_url.rstrip("/")
        self._headers = {"User-Agent": "CuraLink/1.0", "Accept": "application/json"}

    def fetch_studies(
        self, conditions: Sequence[str], *, location: Optional[str] = None, max_results: int = 10
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "query.cond": ",".join(conditions),
            "pageSize": max(1, int(max_results)),
            "format": "json",
        }
        if location:
            params["query.locn"] = location
        response = requests.get(
            f"{self.base_url}/api/v2/studies",
            headers=self._headers,
            params=params,
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        payload = response.json()
        studies = payload.get("studies") if isinstance(payload, dict) else None
        return studies if isinstance(studies, list) else []

    def search(
        self, conditions: Sequence[str], *, location: Optional[str] = None, max_results: int = 10
    ) -> List[Dict[str, Any]]:
        conditions = [c for c in conditions if c]
        if not conditions:
            return []
        studies = self.fetch_studies(conditions, location=location, max_results=max_results)
        needle = (location or "").strip().lower()
        trials = [self._to_trial(s, idx, needle) for idx, s in enumerate(studies) if isinstance(s, dict)]
        if needle:
            # stable sort keeps upstream relevance order within a rank
            trials.sort(key=lambda t: _location_rank(t, needle))
        return trials

    @staticmethod
    def _to_trial(study: Dict[str, Any], index: int, needle: str) -> Dict[str, Any]:
        protocol = study.get("protocolSection") or {}
        ident = protocol.get("identificationModule") or {}
        status_mod = protocol.get("statusModule") or {}
        design = protocol.get("designModule") or {}
        cond_mod = protocol.get("conditionsModule") or {}
        contacts = protocol.get("contactsLocationsModule") or {}
        desc_mod = protocol.get("descriptionModule") or {}
        sponsor_mod = protocol.get("sponsorCollaboratorsModule") or {}

        locations = [loc for loc in contacts.get("locations") or [] if isinstance(loc, dict)]
        best = locations[0] if locations else {}
        if needle:
            for loc in locations:
                if _loc_matches(loc, needle):
                    best = loc
                    break

        nct_id = str(ident.get("nctId") or f"trial-{index}")
        city = best.get("city")
        country = best.get("country")
        return {
            "id": nct_id,
            "title": ident.get("briefTitle") or "Untitled Study",
            "status": _status_label(str(status_mod.get("overallStatus") or "")),
            "phase": _phase_label(design.get("phases") or []),
            "conditions": list(cond_mod.get("conditions") or []),
            "location": f"{city}, {country}" if city and country else "Location not specified",
            "city": city,
            "country": country,
            "description": desc_mod.get("briefSummary") or "",
            "sponsor": (sponsor_mod.get("leadSponsor") or {}).get("name") or "Unknown Sponsor",
            "url": f"https://clinicaltrials.gov/study/{nct_id}" if nct_id.startswith("NCT") else None,
        }
