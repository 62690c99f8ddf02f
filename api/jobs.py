"""
In-memory registry of background analysis runs (production: use Redis).

The pipeline thread only ever hands the job immutable stage snapshots; API
readers see the latest complete snapshot.
"""

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from config.settings import settings
from etl.base import CancellationToken
from etl.pipeline import AnalysisPipeline
from models.exceptions import PipelineCancelled, StageFailure
from models.schemas import AnalysisResult, ETLStage

logger = logging.getLogger(__name__)


@dataclass
class AnalysisJob:
    url: str
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    status: str = "queued"              # queued | running | completed | failed | cancelled
    stages: Tuple[ETLStage, ...] = ()
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    failed_stage: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    cancel_token: CancellationToken = field(default_factory=CancellationToken)

    @property
    def is_finished(self) -> bool:
        return self.status in ("completed", "failed", "cancelled")

    def on_progress(self, stages: Tuple[ETLStage, ...]) -> None:
        self.stages = stages

    def to_dict(self) -> Dict:
        return {
            "job_id": self.job_id,
            "url": self.url,
            "status": self.status,
            "stages": [s.to_dict() for s in self.stages],
            "error": self.error,
            "failed_stage": self.failed_stage,
            "created_at": self.created_at,
            "finished_at": self.finished_at,
        }


class JobRegistry:
    """
    Jobs in submission order. Once more than `max_jobs` are held, the oldest
    finished jobs are dropped; queued / running jobs are never evicted.
    """

    def __init__(self, max_jobs: int = settings.MAX_JOBS):
        self.max_jobs = max_jobs
        self._jobs: Dict[str, AnalysisJob] = OrderedDict()
        self._lock = threading.Lock()

    def create(self, url: str) -> AnalysisJob:
        job = AnalysisJob(url=url)
        with self._lock:
            self._jobs[job.job_id] = job
            self._evict()
        return job

    def _evict(self) -> None:
        excess = len(self._jobs) - self.max_jobs
        if excess <= 0:
            return
        finished = [job_id for job_id, j in self._jobs.items() if j.is_finished][:excess]
        for job_id in finished:
            del self._jobs[job_id]
        if finished:
            logger.debug(f"Evicted {len(finished)} finished jobs")

    def get(self, job_id: str) -> Optional[AnalysisJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()


def run_job(
    job: AnalysisJob,
    pipeline: AnalysisPipeline,
    on_complete: Optional[Callable[[AnalysisResult], None]] = None,
) -> None:
    """Runs in a worker thread (FastAPI BackgroundTasks). `on_complete` gets the result of a successful run."""
    if job.cancel_token.cancelled:
        job.status = "cancelled"
        job.finished_at = datetime.utcnow()
        return

    job.status = "running"
    pipeline.on_progress = job.on_progress
    try:
        job.result = pipeline.run(job.url, cancel_token=job.cancel_token)
        job.status = "completed"
    except StageFailure as e:
        job.status = "failed"
        job.error = e.message
        job.failed_stage = e.stage_name
        logger.error(f"Job {job.job_id} failed at '{e.stage_name}': {e.message}")
    except PipelineCancelled:
        job.status = "cancelled"
        logger.info(f"Job {job.job_id} cancelled")
    finally:
        job.finished_at = datetime.utcnow()

    if job.result is not None and on_complete is not None:
        on_complete(job.result)
