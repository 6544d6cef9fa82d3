from laxdb_pipeline.db.models.source_record import SourceRecord

__all__ = [
    "SourceRecord",
]
