"""Trial and publication search with medical term expansion.

Upstream failures never reach the caller: they are logged and the search
returns an empty list.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from curalink.domain.medical_terms import expand_medical_terms
from curalink.infrastructure.connectors.clinical_trials_connector import ClinicalTrialsConnector
from curalink.infrastructure.connectors.pubmed_connector import PubMedConnector
from curalink.utils.logging_config import LogFiles, Logger

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10
MAX_RESULTS_CAP = 50


def clamp_max_results(value: Optional[int]) -> int:
    if value is None:
        return DEFAULT_MAX_RESULTS
    return max(1, min(int(value), MAX_RESULTS_CAP))


class ExternalDataService:
    def __init__(
        self,
        pubmed: Optional[PubMedConnector] = None,
        trials: Optional[ClinicalTrialsConnector] = None,
    ):
        self._pubmed = pubmed or PubMedConnector()
        self._trials = trials or ClinicalTrialsConnector()

    def search_trials(
        self,
        conditions: Sequence[str],
        *,
        location: Optional[str] = None,
        max_results: Optional[int] = None,
        expand: bool = True,
    ) -> List[Dict[str, Any]]:
        terms = expand_medical_terms(conditions) if expand else [c for c in conditions if c]
        if not terms:
            return []
        try:
            return self._trials.search(
                terms, location=location, max_results=clamp_max_results(max_results)
            )
        except (requests.RequestException, ValueError) as exc:
            logger.warning("ClinicalTrials.gov search failed: %s", exc)
            Logger.error(f"ClinicalTrials.gov search failed terms={terms!r}: {exc}", file=LogFiles.EXTERNAL)
            return []

    def search_publications(
        self,
        conditions: Sequence[str],
        *,
        max_results: Optional[int] = None,
        expand: bool = True,
    ) -> List[Dict[str, Any]]:
        terms = expand_medical_terms(conditions) if expand else [c for c in conditions if c]
        if not terms:
            return []
        try:
            return self._pubmed.search(terms, max_results=clamp_max_results(max_results))
        except (requests.RequestException, ValueError) as exc:
            logger.warning("PubMed search failed: %s", exc)
            Logger.error(f"PubMed search failed terms={terms!r}: {exc}", file=LogFiles.EXTERNAL)
            return []
