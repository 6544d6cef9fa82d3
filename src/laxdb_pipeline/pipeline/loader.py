from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from laxdb_pipeline.db.models.source_record import SourceRecord
from laxdb_pipeline.db.repos.source_record_repo import SourceRecordRepository
from laxdb_pipeline.ingestion.providers.base.types import ExtractedRecord
from laxdb_pipeline.ingestion.seasons import SourceDescriptor

logger = logging.getLogger(__name__)


class LoadError(RuntimeError):
    """Storage write for a source failed; nothing from the batch was kept."""


@dataclass(frozen=True)
class LoadResult:
    source_code: str
    records_seen: int
    created: int
    updated: int
    unchanged: int


class RecordLoader(Protocol):
    def load(self, source: SourceDescriptor, records: Sequence[ExtractedRecord]) -> LoadResult:
        """Upsert `records` for `source`. Raises LoadError on failure."""
        ...


def source_hash(payload: Mapping[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of `payload`, for change detection."""

    content = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SqlRecordLoader:
    """
    Upserts extracted records into `pipeline_source_records`.

    Each call is all-or-nothing: one session and one transaction per source,
    rolled back entirely if any record fails.
    """

    session_factory: sessionmaker[Session]
    clock: Callable[[], datetime] = field(default=_utcnow)

    def load(self, source: SourceDescriptor, records: Sequence[ExtractedRecord]) -> LoadResult:
        # Last occurrence wins when a batch repeats a key.
        latest: dict[tuple[str, str], ExtractedRecord] = {}
        for record in records:
            latest[(str(record.entity_type), record.external_id)] = record

        session = self.session_factory()
        try:
            result = self._upsert(session, source.code, latest.values(), seen=len(records))
            session.commit()
        except Exception as e:
            session.rollback()
            raise LoadError(f"[{source.code}] load failed, batch rolled back: {e}") from e
        finally:
            session.close()

        logger.info(
            "[%s] loaded records_seen=%d created=%d updated=%d unchanged=%d",
            source.code,
            result.records_seen,
            result.created,
            result.updated,
            result.unchanged,
        )
        return result

    def _upsert(
        self,
        session: Session,
        source_code: str,
        records: Iterable[ExtractedRecord],
        *,
        seen: int,
    ) -> LoadResult:
        repo = SourceRecordRepository(session)
        now = self.clock()

        created = 0
        updated = 0
        unchanged = 0

        for record in records:
            entity_type = str(record.entity_type)
            payload = dict(record.payload)
            digest = source_hash(payload)

            existing = repo.get_by_key(
                source_code=source_code,
                entity_type=entity_type,
                external_id=record.external_id,
            )
            if existing is None:
                created += 1
                repo.add(
                    SourceRecord(
                        source_code=source_code,
                        entity_type=entity_type,
                        external_id=record.external_id,
                        payload_json=payload,
                        source_hash=digest,
                        fetched_at=now,
                    ),
                    flush=False,
                )
                continue

            if existing.source_hash == digest:
                unchanged += 1
                continue

            updated += 1
            repo.patch(
                existing,
                {"payload_json": payload, "source_hash": digest, "fetched_at": now},
                flush=False,
            )

        session.flush()
        return LoadResult(
            source_code=source_code,
            records_seen=seen,
            created=created,
            updated=updated,
            unchanged=unchanged,
        )
