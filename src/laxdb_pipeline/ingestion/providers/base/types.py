from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ProviderError


@dataclass(frozen=True)
class ExtractedRecord:
    """One raw record pulled from a source, keyed by a stable per-source id."""

    entity_type: str
    external_id: str
    payload: Mapping[str, Any]


@dataclass(frozen=True)
class ExtractResult:
    """
    Outcome of one extract call.
    Exactly one of `records` (possibly empty) or `error` is meaningful.
    """

    records: list[ExtractedRecord] = field(default_factory=list)
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, records: list[ExtractedRecord]) -> ExtractResult:
        return cls(records=list(records))

    @classmethod
    def failure(cls, error: ProviderError) -> ExtractResult:
        return cls(records=[], error=error)
