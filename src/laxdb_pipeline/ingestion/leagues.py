from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from laxdb_pipeline.ingestion.seasons import (
    SeasonConfigError,
    SeasonDate,
    SeasonWindow,
    SourceDescriptor,
)

# Priority reflects source reliability: lower = more reliable.
LEAGUE_SOURCES: tuple[SourceDescriptor, ...] = (
    SourceDescriptor(
        code="PLL",
        name="Premier Lacrosse League",
        priority=1,
        window=SeasonWindow(start=SeasonDate(6, 1), end=SeasonDate(9, 15)),
    ),
    SourceDescriptor(
        code="NLL",
        name="National Lacrosse League",
        priority=2,
        window=SeasonWindow(start=SeasonDate(12, 1), end=SeasonDate(5, 15)),
    ),
    SourceDescriptor(
        code="MLL",
        name="Major League Lacrosse",
        priority=4,
        window=SeasonWindow(start=SeasonDate(5, 1), end=SeasonDate(8, 30), historical=True),
    ),
    SourceDescriptor(
        code="MSL",
        name="Major Series Lacrosse",
        priority=3,
        window=SeasonWindow(start=SeasonDate(5, 1), end=SeasonDate(9, 30)),
    ),
    SourceDescriptor(
        code="WLA",
        name="Western Lacrosse Association",
        priority=5,
        window=SeasonWindow(start=SeasonDate(5, 1), end=SeasonDate(9, 30)),
    ),
)


def build_source_table(
    descriptors: Iterable[SourceDescriptor] = LEAGUE_SOURCES,
) -> Mapping[str, SourceDescriptor]:
    """Read-only source table keyed by code, in declaration order."""

    table: dict[str, SourceDescriptor] = {}
    for descriptor in descriptors:
        if not descriptor.code:
            raise SeasonConfigError("Source code must be a non-empty string.")
        if descriptor.code in table:
            raise SeasonConfigError(f"Duplicate source code in season table: {descriptor.code}")
        table[descriptor.code] = descriptor
    return MappingProxyType(table)
