"""
FastAPI application for the Review Sentiment ETL.

Start with `python main.py api` or `uvicorn api.main:app`.
"""

import logging
import sys
import os
from contextlib import asynccontextmanager

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router
from config.lexicon import get_lexicon
from config.settings import settings
from models.exceptions import AnalysisError

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    lexicon = get_lexicon()
    logger.info(
        f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} up "
        f"(lexicon: {len(lexicon.positive)} positive / {len(lexicon.negative)} negative words)"
    )
    yield
    logger.info("API shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Staged ETL pipeline for review / comment sentiment. "
        "Extracts text records from a URL, scores sentiment with a fixed lexicon, "
        "summarizes polarity statistics, ranks keywords and grades data quality."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    logger.error(f"{request.method} {request.url.path} -> {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=500, content={"detail": exc.message, "error": type(exc).__name__})


app.include_router(router, prefix="/api/v1")


@app.get("/", tags=["System"])
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": sorted({f"/api/v1{route.path}" for route in router.routes}),
        "status": "running",
    }
