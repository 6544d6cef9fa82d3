from __future__ import annotations

from datetime import UTC, datetime

import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from laxdb_pipeline.db import create_session_factory, create_tables
from laxdb_pipeline.db.repos.source_record_repo import SourceRecordRepository
from laxdb_pipeline.ingestion.leagues import build_source_table
from laxdb_pipeline.ingestion.providers.base.types import ExtractedRecord
from laxdb_pipeline.pipeline.loader import LoadError, SqlRecordLoader, source_hash

PLL = build_source_table()["PLL"]
NLL = build_source_table()["NLL"]


def _make_session_factory() -> sessionmaker[Session]:
    engine = sa.create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    return create_session_factory(engine)


def _records() -> list[ExtractedRecord]:
    return [
        ExtractedRecord("team", "ARC", {"fullName": "Archers"}),
        ExtractedRecord("team", "WHP", {"fullName": "Whipsnakes"}),
        ExtractedRecord("standing", "2025:ARC", {"wins": 7}),
    ]


def test_load_is_idempotent() -> None:
    factory = _make_session_factory()
    loader = SqlRecordLoader(factory, clock=lambda: datetime(2025, 7, 10, tzinfo=UTC))

    first = loader.load(PLL, _records())
    second = loader.load(PLL, _records())

    assert (first.created, first.updated, first.unchanged) == (3, 0, 0)
    assert (second.created, second.updated, second.unchanged) == (0, 0, 3)

    with factory() as session:
        rows = SourceRecordRepository(session).list_for_source("PLL")
    assert sorted((r.entity_type, r.external_id) for r in rows) == [
        ("standing", "2025:ARC"),
        ("team", "ARC"),
        ("team", "WHP"),
    ]


def test_load_updates_changed_payloads() -> None:
    factory = _make_session_factory()
    loader = SqlRecordLoader(factory)
    loader.load(PLL, _records())

    changed = [ExtractedRecord("standing", "2025:ARC", {"wins": 8})]
    result = loader.load(PLL, changed)

    assert (result.created, result.updated, result.unchanged) == (0, 1, 0)
    with factory() as session:
        row = SourceRecordRepository(session).get_by_key(
            source_code="PLL", entity_type="standing", external_id="2025:ARC"
        )
    assert row is not None
    assert row.payload_json == {"wins": 8}
    assert row.source_hash == source_hash({"wins": 8})


def test_same_external_id_is_scoped_per_source() -> None:
    factory = _make_session_factory()
    loader = SqlRecordLoader(factory)

    loader.load(PLL, [ExtractedRecord("team", "1", {"name": "a"})])
    result = loader.load(NLL, [ExtractedRecord("team", "1", {"name": "b"})])

    assert result.created == 1
    with factory() as session:
        repo = SourceRecordRepository(session)
        assert len(repo.list_for_source("PLL")) == 1
        assert len(repo.list_for_source("NLL")) == 1


def test_duplicate_keys_in_one_batch_keep_the_last() -> None:
    factory = _make_session_factory()
    loader = SqlRecordLoader(factory)

    result = loader.load(
        PLL,
        [
            ExtractedRecord("team", "ARC", {"fullName": "Old"}),
            ExtractedRecord("team", "ARC", {"fullName": "New"}),
        ],
    )

    assert result.records_seen == 2
    assert result.created == 1
    with factory() as session:
        row = SourceRecordRepository(session).get_by_key(
            source_code="PLL", entity_type="team", external_id="ARC"
        )
    assert row is not None
    assert row.payload_json == {"fullName": "New"}


def test_failed_batch_is_rolled_back_entirely() -> None:
    factory = _make_session_factory()
    loader = SqlRecordLoader(factory)

    bad = [
        ExtractedRecord("team", "ARC", {"fullName": "Archers"}),
        ExtractedRecord("team", "BAD", {"unserializable": object()}),
    ]

    with pytest.raises(LoadError):
        loader.load(PLL, bad)

    with factory() as session:
        assert SourceRecordRepository(session).list_for_source("PLL") == []


def test_source_hash_ignores_key_order() -> None:
    assert source_hash({"a": 1, "b": 2}) == source_hash({"b": 2, "a": 1})
    assert source_hash({"a": 1}) != source_hash({"a": 2})
