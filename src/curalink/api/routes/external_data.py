from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from curalink.application.services.external_data_service import ExternalDataService
from curalink.domain.medical_terms import split_terms
from curalink.utils.logging_config import LogFiles, Logger

router = APIRouter()

_external_data_service = ExternalDataService()


@router.get("/external-data/clinical-trials")
def clinical_trials(
    conditions: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    maxResults: Optional[int] = Query(None, ge=1),
    expand: bool = Query(True),
):
    terms = split_terms(conditions)
    trials = _external_data_service.search_trials(
        terms, location=(location or "").strip() or None, max_results=maxResults, expand=expand
    )
    Logger.info(f"Trial search terms={terms!r} results={len(trials)}", file=LogFiles.EXTERNAL)
    return {"trials": trials, "count": len(trials)}


@router.get("/external-data/publications")
def publications(
    conditions: Optional[str] = Query(None),
    maxResults: Optional[int] = Query(None, ge=1),
    expand: bool = Query(True),
):
    terms = split_terms(conditions)
    items = _external_data_service.search_publications(terms, max_results=maxResults, expand=expand)
    Logger.info(f"Publication search terms={terms!r} results={len(items)}", file=LogFiles.EXTERNAL)
    return {"publications": items, "count": len(items)}
