"""Analysis routes: run a competitor analysis and fetch stored reports."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from rivalscan.api.deps import get_analyzer, get_store
from rivalscan.api.schemas import AnalyzeRequest, AnalyzeResponse
from rivalscan.data.analyzer import CompetitorAnalyzer
from rivalscan.data.store import SqlReportStore
from rivalscan.errors import (
    AnalysisError,
    BusinessNotFound,
    ClassificationMalformed,
    DataSourceUnavailable,
    NoPeersFound,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["analysis"])


def status_for(error: AnalysisError) -> int:
    # BusinessNotFound subclasses DataSourceUnavailable, so it is checked first
    if isinstance(error, BusinessNotFound):
        return 404
    if isinstance(error, NoPeersFound):
        return 422
    if isinstance(error, (DataSourceUnavailable, ClassificationMalformed)):
        return 502
    return 500


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    req: AnalyzeRequest,
    analyzer: CompetitorAnalyzer = Depends(get_analyzer),
):
    """Run the full competitor analysis and store the report."""
    try:
        report_id, _ = await analyzer.analyze_and_save(req.name.strip(), req.city.strip())
    except AnalysisError as e:
        logger.warning("Analysis of %s, %s failed: %s", req.name, req.city, e)
        raise HTTPException(
            status_code=status_for(e),
            detail={"error": e.message, "detail": e.detail},
        ) from e

    return AnalyzeResponse(report_id=report_id)


@router.get("/reports/{report_id}")
async def get_report(report_id: str, store: SqlReportStore = Depends(get_store)):
    """Stored report blob, as produced at analysis time."""
    data = await store.get(report_id)
    if data is None:
        raise HTTPException(status_code=404, detail={"error": "Report not found", "detail": report_id})
    return data
