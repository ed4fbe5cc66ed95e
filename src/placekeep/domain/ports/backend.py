"""Network boundary ports (remote record backend)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from placekeep.domain.merge import DetailedRecord, ProviderPlaceRecord, SummaryRecord
    from placekeep.domain.model import (
        CreatedRecord,
        GeoBounds,
        Itinerary,
        Place,
        RelationshipFlag,
        Review,
        ReviewDraft,
        ReviewPatch,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class SummaryScope:
    """Viewport / user scope of a summary refresh."""

    bounds: GeoBounds | None = None
    limit: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ItineraryPatch:
    order: tuple[str, ...] | None = None
    add: Place | None = None
    remove: str | None = None
    notes: dict[str, str | None] = field(default_factory=dict)


@runtime_checkable
class RecordBackend(Protocol):
    """Remote procedure calls against the user's record store."""

    async def create_record(
        self, place: Place, draft: ReviewDraft, photo_paths: Sequence[str]
    ) -> CreatedRecord: ...

    async def update_record(self, record_id: str, patch: ReviewPatch) -> Review: ...

    async def delete_record(self, record_id: str) -> bool: ...

    async def fetch_summaries(self, scope: SummaryScope) -> list[SummaryRecord]: ...

    async def fetch_detailed_record(self, external_id: str) -> DetailedRecord | None: ...

    async def set_relationship_flag(
        self,
        place: Place,
        flag: RelationshipFlag,
        value: bool,  # noqa: FBT001
    ) -> bool: ...

    async def fetch_place_details(self, external_id: str) -> ProviderPlaceRecord | None: ...

    async def fetch_itineraries(self, on_date: date) -> list[Itinerary]: ...

    async def create_itinerary(self, name: str, on_date: date) -> Itinerary: ...

    async def update_itinerary(self, group_id: int, patch: ItineraryPatch) -> Itinerary: ...

    async def delete_itinerary(self, group_id: int) -> bool: ...
