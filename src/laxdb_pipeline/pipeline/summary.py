from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from laxdb_pipeline.pipeline.tasks import ExtractionTask, TaskStatus

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Aggregated outcome of one scheduled invocation. Logged, never persisted."""

    started_at: datetime
    finished_at: datetime
    duration_seconds: float
    active_sources: list[str] = field(default_factory=list)
    tasks: list[ExtractionTask] = field(default_factory=list)

    def _codes(self, *statuses: TaskStatus) -> list[str]:
        return [t.source_code for t in self.tasks if t.status in statuses]

    @property
    def succeeded(self) -> list[str]:
        return self._codes(TaskStatus.SUCCEEDED)

    @property
    def failed(self) -> list[str]:
        return self._codes(
            TaskStatus.FAILED_EXTRACT, TaskStatus.FAILED_LOAD, TaskStatus.FAILED_INVALIDATE
        )

    @property
    def timed_out(self) -> list[str]:
        return self._codes(TaskStatus.TIMED_OUT)

    @property
    def skipped(self) -> list[str]:
        return self._codes(TaskStatus.SKIPPED)

    @property
    def outcomes(self) -> dict[str, TaskStatus]:
        return {t.source_code: t.status for t in self.tasks}

    def task_for(self, source_code: str) -> ExtractionTask | None:
        for task in self.tasks:
            if task.source_code == source_code:
                return task
        return None

    def as_log_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_ms": round(self.duration_seconds * 1000),
            "active": self.active_sources,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "timed_out": self.timed_out,
            "skipped": self.skipped,
            "sources": {
                t.source_code: {"status": str(t.status), "error": t.error} for t in self.tasks
            },
        }


def log_run_summary(summary: RunSummary) -> None:
    for task in summary.tasks:
        status = task.status
        if status is TaskStatus.SUCCEEDED:
            logger.info("[Cron] %s completed successfully", task.source_code)
        elif status is TaskStatus.SKIPPED:
            logger.info("[Cron] %s skipped: no extractor registered", task.source_code)
        elif status in (TaskStatus.FAILED_INVALIDATE, TaskStatus.TIMED_OUT):
            logger.warning("[Cron] %s %s: %s", task.source_code, status, task.error)
        else:
            logger.error("[Cron] %s %s: %s", task.source_code, status, task.error)

    logger.info(
        "[Cron] Completed in %dms - Success: %d, Failed: %d, Timed out: %d, Skipped: %d",
        round(summary.duration_seconds * 1000),
        len(summary.succeeded),
        len(summary.failed),
        len(summary.timed_out),
        len(summary.skipped),
    )
    logger.info("run_summary %s", json.dumps(summary.as_log_dict(), sort_keys=True))
