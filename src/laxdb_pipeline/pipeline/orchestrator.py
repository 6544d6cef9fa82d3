"""Scheduled multi-league extraction run.

One invocation:
    compute active sources -> fan out extract/load/invalidate per source -> collect -> log

Sources are isolated from each other: a failure or a hang in one source's task
never cancels or delays the others, and never fails the invocation. Only a
failure to compute the active source set is fatal.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, tzinfo

from laxdb_pipeline.ingestion.providers.base.registry import ExtractorRegistry
from laxdb_pipeline.ingestion.seasons import SeasonConfigError, SourceDescriptor, active_sources
from laxdb_pipeline.pipeline.loader import RecordLoader
from laxdb_pipeline.pipeline.summary import RunSummary, log_run_summary
from laxdb_pipeline.pipeline.tasks import ExtractionTask, SourceInvalidator, run_extraction_task

logger = logging.getLogger(__name__)


class PipelineConfigError(RuntimeError):
    """The active source set could not be computed; the invocation is aborted."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class OrchestratorConfig:
    max_concurrency: int = 5
    run_deadline_s: float = 900.0
    timezone: tzinfo = field(default=UTC)


class PipelineOrchestrator:
    """Runs one extraction pass over the currently active sources.

    Usage:
        >>> orchestrator = PipelineOrchestrator(
        ...     sources=build_source_table(),
        ...     extractors=build_default_registry(settings),
        ...     loader=SqlRecordLoader(session_factory),
        ...     invalidator=CacheInvalidator(store),
        ... )
        >>> summary = orchestrator.run()
    """

    def __init__(
        self,
        *,
        sources: Mapping[str, SourceDescriptor],
        extractors: ExtractorRegistry,
        loader: RecordLoader,
        invalidator: SourceInvalidator,
        config: OrchestratorConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.sources = sources
        self.extractors = extractors
        self.loader = loader
        self.invalidator = invalidator
        self.config = config or OrchestratorConfig()
        self.clock = clock

    def resolve_sources(
        self, now: datetime, only: Sequence[str] | None = None
    ) -> list[SourceDescriptor]:
        """Sources to run for `now`, or exactly `only` when given (ignoring seasons)."""

        if only:
            unknown = [code for code in only if code not in self.sources]
            if unknown:
                raise SeasonConfigError(f"Unknown source code(s): {', '.join(unknown)}")
            return [self.sources[code] for code in dict.fromkeys(only)]

        return active_sources(now, self.sources.values(), tz=self.config.timezone)

    def run(self, now: datetime | None = None, *, only: Sequence[str] | None = None) -> RunSummary:
        started_at = now or self.clock()
        t0 = time.monotonic()
        logger.info("[Cron] Starting scheduled extraction at %s", started_at.isoformat())

        try:
            active = self.resolve_sources(started_at, only)
        except Exception as e:
            logger.exception("[Cron] Could not compute active sources")
            raise PipelineConfigError(f"Could not compute active sources: {e}") from e

        if not active:
            logger.info("[Cron] No active leagues, skipping extraction")
            summary = self._summarize(started_at, t0, [], [])
            log_run_summary(summary)
            return summary

        codes = [source.code for source in active]
        logger.info("[Cron] Active leagues: %s", ", ".join(codes))

        tasks = self._fan_out(active)
        summary = self._summarize(started_at, t0, codes, tasks)
        log_run_summary(summary)
        return summary

    def _fan_out(self, active: list[SourceDescriptor]) -> list[ExtractionTask]:
        pool = ThreadPoolExecutor(
            max_workers=min(self.config.max_concurrency, len(active)),
            thread_name_prefix="pipeline",
        )
        cancelled = threading.Event()
        futures: dict[Future[ExtractionTask], SourceDescriptor] = {}
        try:
            for source in active:
                future = pool.submit(
                    run_extraction_task,
                    source,
                    get_extractor=self.extractors.get,
                    loader=self.loader,
                    invalidator=self.invalidator,
                    clock=self.clock,
                    cancelled=cancelled,
                )
                futures[future] = source

            _, not_done = wait(futures, timeout=self.config.run_deadline_s)
        finally:
            # Workers still running stop before their next stage.
            cancelled.set()
            pool.shutdown(wait=False, cancel_futures=True)

        results: dict[str, ExtractionTask] = {}
        for future, source in futures.items():
            if future in not_done:
                future.cancel()
                logger.warning(
                    "[Cron] %s did not finish within %.0fs, abandoning",
                    source.code,
                    self.config.run_deadline_s,
                )
                results[source.code] = ExtractionTask(source_code=source.code, timed_out=True)
            else:
                results[source.code] = future.result()

        return [results[source.code] for source in active]

    def _summarize(
        self,
        started_at: datetime,
        t0: float,
        codes: list[str],
        tasks: list[ExtractionTask],
    ) -> RunSummary:
        elapsed = time.monotonic() - t0
        return RunSummary(
            started_at=started_at,
            finished_at=started_at + timedelta(seconds=elapsed),
            duration_seconds=elapsed,
            active_sources=codes,
            tasks=tasks,
        )
