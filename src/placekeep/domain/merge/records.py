"""Tagged record variants produced by the boundary classifier.

Every inbound place payload is converted into exactly one of these before any
merge logic runs. Field values of ``None`` mean "this source says nothing".
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar

from placekeep.domain.model import Coordinates, GroupContext, RecordKind, RelationshipFlag, Review


@dataclass(frozen=True, slots=True, kw_only=True)
class PlaceRecord:
    kind: ClassVar[RecordKind]

    external_id: str | None = None
    internal_id: int | None = None
    name: str | None = None
    coordinates: Coordinates | None = None
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    rating: float | None = None
    opening_hours: tuple[str, ...] | None = None
    reservable: bool | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderPlaceRecord(PlaceRecord):
    """Provider search result: geometry plus a provider place id."""

    kind: ClassVar[RecordKind] = RecordKind.PROVIDER


@dataclass(frozen=True, slots=True, kw_only=True)
class SummaryRecord(PlaceRecord):
    """Lightweight server summary declaring relationship flags."""

    kind: ClassVar[RecordKind] = RecordKind.SUMMARY

    flags: Mapping[RelationshipFlag, bool] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class DetailedRecord(PlaceRecord):
    """Full server record carrying the review collection.

    ``clears_group`` is set when the payload explicitly nulls the group fields.
    """

    kind: ClassVar[RecordKind] = RecordKind.DETAILED

    flags: Mapping[RelationshipFlag, bool] = field(default_factory=dict)
    reviews: tuple[Review, ...] = ()
    group: GroupContext | None = None
    clears_group: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class PersistedRecord(PlaceRecord):
    """Raw persisted row: has a creation timestamp, no relationship state."""

    kind: ClassVar[RecordKind] = RecordKind.PERSISTED

    created_at: datetime | None = None


type SourceRecord = ProviderPlaceRecord | SummaryRecord | DetailedRecord | PersistedRecord
