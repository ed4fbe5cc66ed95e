"""Merge engine: tagged record variants and field-precedence merging."""

from __future__ import annotations

from .engine import merge
from .records import (
    DetailedRecord,
    PersistedRecord,
    PlaceRecord,
    ProviderPlaceRecord,
    SourceRecord,
    SummaryRecord,
)

__all__ = [
    "DetailedRecord",
    "PersistedRecord",
    "PlaceRecord",
    "ProviderPlaceRecord",
    "SourceRecord",
    "SummaryRecord",
    "merge",
]
