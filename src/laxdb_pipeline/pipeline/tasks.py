from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

from laxdb_pipeline.ingestion.providers.base.errors import ProviderCapabilityError, ProviderError
from laxdb_pipeline.ingestion.providers.base.extractor import SourceExtractor
from laxdb_pipeline.ingestion.providers.base.types import ExtractedRecord
from laxdb_pipeline.ingestion.seasons import SourceDescriptor
from laxdb_pipeline.pipeline.loader import RecordLoader

logger = logging.getLogger(__name__)


class TaskStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED_EXTRACT = "failed_extract"
    FAILED_LOAD = "failed_load"
    FAILED_INVALIDATE = "failed_invalidate"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"


class SourceInvalidator(Protocol):
    def invalidate(self, source_code: str) -> object:
        """Drop derived caches for a source. Raises on failure."""
        ...


@dataclass(frozen=True)
class StageOutcome:
    ok: bool
    error: str | None = None
    error_type: str | None = None
    detail: str | None = None

    @classmethod
    def success(cls, detail: str | None = None) -> StageOutcome:
        return cls(ok=True, detail=detail)

    @classmethod
    def failure(cls, error: BaseException) -> StageOutcome:
        return cls(ok=False, error=str(error) or repr(error), error_type=type(error).__name__)


@dataclass
class ExtractionTask:
    """Outcome of extract -> load -> invalidate for one source in one run.

    A stage left as None was never reached.
    """

    source_code: str
    started_at: datetime | None = None
    finished_at: datetime | None = None
    extract: StageOutcome | None = None
    load: StageOutcome | None = None
    invalidate: StageOutcome | None = None
    timed_out: bool = False
    skipped: bool = False

    @property
    def status(self) -> TaskStatus:
        if self.timed_out:
            return TaskStatus.TIMED_OUT
        if self.skipped:
            return TaskStatus.SKIPPED
        if self.extract is None or not self.extract.ok:
            return TaskStatus.FAILED_EXTRACT
        if self.load is None or not self.load.ok:
            return TaskStatus.FAILED_LOAD
        if self.invalidate is None or not self.invalidate.ok:
            return TaskStatus.FAILED_INVALIDATE
        return TaskStatus.SUCCEEDED

    @property
    def succeeded(self) -> bool:
        return self.status is TaskStatus.SUCCEEDED

    @property
    def error(self) -> str | None:
        if self.timed_out:
            return "run deadline exceeded before the task finished"
        for stage in (self.extract, self.load, self.invalidate):
            if stage is not None and not stage.ok:
                return f"{stage.error_type}: {stage.error}"
        return None


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _close(extractor: SourceExtractor, source_code: str) -> None:
    close = getattr(extractor, "close", None)
    if not callable(close):
        return
    try:
        close()
    except Exception:
        logger.exception("[%s] failed to close extractor", source_code)


def _extract(
    source: SourceDescriptor, get_extractor: Callable[[str], SourceExtractor]
) -> tuple[StageOutcome, list[ExtractedRecord]]:
    extractor = get_extractor(source.code)
    try:
        result = extractor.extract(source)
    finally:
        _close(extractor, source.code)

    if result.error is not None:
        return StageOutcome.failure(result.error), []
    return StageOutcome.success(f"records={len(result.records)}"), result.records


def _abandoned(task: ExtractionTask, cancelled: threading.Event | None, stage: str) -> bool:
    if cancelled is None or not cancelled.is_set():
        return False
    logger.warning("[%s] run deadline passed, not starting %s", task.source_code, stage)
    task.timed_out = True
    return True


def run_extraction_task(
    source: SourceDescriptor,
    *,
    get_extractor: Callable[[str], SourceExtractor],
    loader: RecordLoader,
    invalidator: SourceInvalidator,
    clock: Callable[[], datetime] = _utcnow,
    cancelled: threading.Event | None = None,
) -> ExtractionTask:
    """Run the three stages for one source. Never raises for stage failures.

    `cancelled` is set by the orchestrator once the run deadline has passed; a
    task still running at that point stops before its next stage.
    """

    task = ExtractionTask(source_code=source.code, started_at=clock())
    logger.info("[%s] Starting extraction...", source.code)

    records: list[ExtractedRecord] = []
    try:
        extracted, records = _extract(source, get_extractor)
    except ProviderCapabilityError as e:
        task.skipped = True
        task.extract = StageOutcome.failure(e)
        logger.info("[%s] no extractor registered, skipping", source.code)
        task.finished_at = clock()
        return task
    except ProviderError as e:
        extracted = StageOutcome.failure(e)
    except Exception as e:
        logger.exception("[%s] extractor raised", source.code)
        extracted = StageOutcome.failure(e)
    task.extract = extracted

    if not extracted.ok:
        logger.error("[%s] extract failed, skipping load: %s", source.code, extracted.error)
        task.finished_at = clock()
        return task

    if _abandoned(task, cancelled, "load"):
        task.finished_at = clock()
        return task

    logger.info("[%s] Loading %d records...", source.code, len(records))
    try:
        loaded = loader.load(source, records)
    except Exception as e:
        task.load = StageOutcome.failure(e)
        logger.error("[%s] load failed, skipping invalidate: %s", source.code, e)
        task.finished_at = clock()
        return task
    task.load = StageOutcome.success(
        f"created={loaded.created} updated={loaded.updated} unchanged={loaded.unchanged}"
    )

    if _abandoned(task, cancelled, "invalidate"):
        task.finished_at = clock()
        return task

    logger.info("[%s] Invalidating cache...", source.code)
    try:
        invalidator.invalidate(source.code)
    except Exception as e:
        task.invalidate = StageOutcome.failure(e)
        logger.warning("[%s] cache invalidation failed, data is loaded: %s", source.code, e)
    else:
        task.invalidate = StageOutcome.success()

    task.finished_at = clock()
    return task
