from __future__ import annotations

from typing import Protocol

from laxdb_pipeline.ingestion.seasons import SourceDescriptor

from .types import ExtractResult


class SourceExtractor(Protocol):
    """
    Orchestration depends on this, not on any HTTP client.

    Ordinary transient failures (timeouts, non-2xx, malformed payloads) are
    returned as ExtractResult.failure(...) rather than raised.
    """

    source_code: str

    def extract(self, source: SourceDescriptor) -> ExtractResult:
        """Pull the current records for `source`. Network I/O only; never writes storage."""
        ...
