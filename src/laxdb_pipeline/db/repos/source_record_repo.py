from __future__ import annotations

from sqlalchemy.orm import Session

from laxdb_pipeline.db.models.source_record import SourceRecord
from laxdb_pipeline.db.repos.base import BaseRepository


class SourceRecordRepository(BaseRepository[SourceRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=SourceRecord)

    def get_by_key(
        self, *, source_code: str, entity_type: str, external_id: str
    ) -> SourceRecord | None:
        return self.first_where(
            SourceRecord.source_code == source_code,
            SourceRecord.entity_type == entity_type,
            SourceRecord.external_id == external_id,
        )

    def list_for_source(self, source_code: str) -> list[SourceRecord]:
        return self.list_where(SourceRecord.source_code == source_code)
