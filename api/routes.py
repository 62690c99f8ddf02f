"""
FastAPI Route Handlers
Review Sentiment ETL
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import Response

from analysis.sentiment import SentimentScorer
from api.jobs import JobRegistry, run_job
from api.schemas import (
    HealthResponse, JobResponse, RunAnalysisRequest,
    ScoreTextRequest, SentimentResponse,
)
from config.settings import settings
from etl.extractor import ContentExtractor, parse_domain
from etl.pipeline import AnalysisPipeline
from models.exceptions import InvalidURLError, StageFailure
from models.schemas import AnalysisResult, ETLStage
from utils.export import csv_filename, sentiment_csv

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory state (production: use Redis)
_last_result: Optional[AnalysisResult] = None
jobs = JobRegistry()
_scorer = SentimentScorer()


def get_extractor() -> ContentExtractor:
    return ContentExtractor()


def _validate_url(url: str) -> None:
    try:
        parse_domain(url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=e.message)


def _remember_result(result: AnalysisResult) -> None:
    global _last_result
    _last_result = result


def _require_last_result() -> AnalysisResult:
    if _last_result is None:
        raise HTTPException(status_code=404, detail="No analysis results available. Run /analysis/run first.")
    return _last_result


# ─── Health ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow(),
    )


# ─── Scoring ─────────────────────────────────────────────────────────────────

@router.post("/sentiment/score", response_model=SentimentResponse, tags=["Sentiment"])
async def score_text(request: ScoreTextRequest):
    """Score one text with the lexicon scorer."""
    return SentimentResponse(**_scorer.score(request.text).to_dict())


# ─── Analysis ────────────────────────────────────────────────────────────────

@router.post("/analysis/run", tags=["Analysis"])
async def run_analysis(request: RunAnalysisRequest, extractor: ContentExtractor = Depends(get_extractor)):
    """
    Execute the full pipeline and return the result:
    Fetch → Parse → Clean → Sentiment → Statistics → Keywords → Quality → Finalize
    """
    _validate_url(request.url)

    pipeline = AnalysisPipeline(extractor=extractor, keyword_top_n=request.keyword_top_n)
    try:
        result = await pipeline.execute(request.url)
    except StageFailure as e:
        logger.error(f"Analysis failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={"stage": e.stage_name, "message": e.message},
        )

    _remember_result(result)
    return result.to_dict()


@router.get("/analysis/latest", tags=["Analysis"])
async def get_latest():
    return _require_last_result().to_dict()


@router.get("/analysis/latest/export.csv", tags=["Analysis"])
async def export_latest_csv():
    result = _require_last_result()
    return Response(
        content=sentiment_csv(result.sentiment_results),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename()}"'},
    )


# ─── Background Jobs ─────────────────────────────────────────────────────────

@router.post("/analysis/jobs", response_model=JobResponse, status_code=202, tags=["Jobs"])
async def submit_job(
    request: RunAnalysisRequest,
    background_tasks: BackgroundTasks,
    extractor: ContentExtractor = Depends(get_extractor),
):
    """Start a run in the background; poll GET /analysis/jobs/{job_id} for stage progress."""
    _validate_url(request.url)

    job = jobs.create(request.url)
    pipeline = AnalysisPipeline(extractor=extractor, keyword_top_n=request.keyword_top_n)
    job.stages = tuple(ETLStage(name=s.name) for s in pipeline.build_stages(request.url))
    background_tasks.add_task(run_job, job, pipeline, _remember_result)
    return JobResponse(**job.to_dict())


@router.get("/analysis/jobs/{job_id}", response_model=JobResponse, tags=["Jobs"])
async def get_job(job_id: str):
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found.")
    return JobResponse(**job.to_dict())


@router.get("/analysis/jobs/{job_id}/result", tags=["Jobs"])
async def get_job_result(job_id: str):
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found.")
    if job.status == "failed":
        raise HTTPException(
            status_code=500,
            detail={"stage": job.failed_stage, "message": job.error},
        )
    if job.status == "cancelled":
        raise HTTPException(status_code=409, detail=f"Job {job_id} was cancelled.")
    if job.result is None:
        raise HTTPException(status_code=409, detail=f"Job {job_id} is still {job.status}.")
    return job.result.to_dict()


@router.delete("/analysis/jobs/{job_id}", response_model=JobResponse, tags=["Jobs"])
async def cancel_job(job_id: str):
    """Request cancellation; the run stops before its next stage."""
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found.")
    if job.status in ("queued", "running"):
        job.cancel_token.cancel()
    return JobResponse(**job.to_dict())
