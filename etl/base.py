"""
Base Stage class and Orchestrator
Review Sentiment ETL
"""

from abc import ABC, abstractmethod
from collections.abc import Sized
from dataclasses import replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple
import logging
import threading
import time

from models.exceptions import PipelineCancelled, StageFailure
from models.schemas import ETLStage, StageStatus

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Tuple[ETLStage, ...]], None]


class CancellationToken:
    """Checked by the orchestrator between stages. Safe to set from another thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class Stage(ABC):
    """
    Abstract base class for all pipeline stages.
    Subclasses must implement `run(data, outputs)`.

    `data` is the previous stage's output (the pipeline input for the first
    stage); `outputs` is a read-only view of every earlier stage's output,
    keyed by stage key.
    """

    def __init__(self, name: str, key: str):
        self.name = name
        self.key = key
        self.logger = logging.getLogger(f"stage.{key}")

    @abstractmethod
    def run(self, data: Any, outputs: Mapping[str, Any]) -> Any:
        raise NotImplementedError

    def __repr__(self):
        return f"<Stage: {self.name}>"


def count_records(output: Any) -> int:
    if isinstance(output, Sized) and not isinstance(output, (str, bytes)):
        return len(output)
    return 1


class Orchestrator:
    """
    Sequential stage orchestrator. Each stage's output becomes the next
    stage's input; the first failure aborts the run.

    An instance runs once. The stage records it owns are frozen and replaced on
    every transition; progress callbacks receive a tuple snapshot.
    """

    def __init__(
        self,
        stages: Sequence[Stage],
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        keys = [s.key for s in stages]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Stage keys must be unique: {keys}")

        self._stage_impls: List[Stage] = list(stages)
        self._records: List[ETLStage] = [ETLStage(name=s.name) for s in stages]
        self._outputs: Dict[str, Any] = {}
        self._executed = False
        self.on_progress = on_progress
        self.cancel_token = cancel_token or CancellationToken()
        self.logger = logging.getLogger("orchestrator")

    @property
    def stages(self) -> Tuple[ETLStage, ...]:
        return tuple(self._records)

    @property
    def outputs(self) -> Mapping[str, Any]:
        return MappingProxyType(self._outputs)

    def _transition(self, index: int, **changes) -> None:
        self._records[index] = replace(self._records[index], **changes)
        self._notify()

    def _notify(self) -> None:
        if self.on_progress is None:
            return
        snapshot = self.stages
        try:
            self.on_progress(snapshot)
        except Exception:
            # observers never decide the outcome of a run
            self.logger.exception("Progress callback raised; continuing")

    def execute(self, input_data: Any) -> Mapping[str, Any]:
        """
        Run every stage in order and return the outputs keyed by stage key.
        Raises StageFailure on the first failing stage, PipelineCancelled if
        the token is set between stages.
        """
        if self._executed:
            raise RuntimeError("Orchestrator instances run once; build a new one per run")
        self._executed = True

        data = input_data
        total_start = time.time()
        n = len(self._stage_impls)
        self.logger.info(f"🚀 Orchestrator starting — {n} stages in pipeline")

        for i, stage in enumerate(self._stage_impls):
            if self.cancel_token.cancelled:
                self.logger.warning(f"  ⛔ Cancelled before '{stage.name}'")
                raise PipelineCancelled(stage.name)

            self.logger.info(f"  [{i + 1}/{n}] {stage.name}")
            self._transition(i, status=StageStatus.RUNNING, start_time=datetime.utcnow())

            try:
                result = stage.run(data, self.outputs)
            except Exception as e:
                message = str(e) or type(e).__name__
                stage.logger.error(f"[{stage.name}] Failed: {message}", exc_info=True)
                self._transition(
                    i,
                    status=StageStatus.FAILED,
                    end_time=datetime.utcnow(),
                    error_message=message,
                )
                raise StageFailure(stage.name, message) from e

            self._outputs[stage.key] = result
            self._transition(
                i,
                status=StageStatus.COMPLETED,
                progress=100,
                end_time=datetime.utcnow(),
                records_processed=count_records(result),
            )
            stage.logger.info(
                f"[{stage.name}] Completed in {self._records[i].duration_seconds:.2f}s "
                f"({self._records[i].records_processed} records)"
            )
            data = result

        elapsed = time.time() - total_start
        self.logger.info(f"✅ Pipeline complete — {n}/{n} stages succeeded in {elapsed:.2f}s")
        return self.outputs

    def summary(self) -> str:
        lines = ["Pipeline Summary:"]
        for r in self._records:
            lines.append(f"  {r!r}")
        return "\n".join(lines)
