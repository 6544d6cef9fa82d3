from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from laxdb_pipeline.db.base import Base, TimestampMixin


class SourceRecord(Base, TimestampMixin):
    """Raw record extracted from one league source, upserted by its external id."""

    __tablename__ = "pipeline_source_records"

    id: Mapped[int] = mapped_column(primary_key=True)

    source_code: Mapped[str] = mapped_column(String(10), nullable=False)  # e.g. "PLL"
    entity_type: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # "team", "player", "standing", "game"
    external_id: Mapped[str] = mapped_column(String(100), nullable=False)

    payload_json: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
    )
    source_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "source_code",
            "entity_type",
            "external_id",
            name="uq_pipeline_source_records_source_entity_external",
        ),
        Index("ix_pipeline_source_records_source_entity", "source_code", "entity_type"),
    )
