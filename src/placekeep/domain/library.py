"""Refreshing cached places and toggling relationship flags."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.errors import ConflictOrServerError, TransientNetworkError
from placekeep.domain.model import RecordKind, RelationshipFlag
from placekeep.domain.optimistic import OptimisticCoordinator, StoreBinding
from placekeep.domain.ports.backend import SummaryScope

if TYPE_CHECKING:
    from placekeep.domain.connectivity import ConnectivitySignal
    from placekeep.domain.model import Coordinates, GeoBounds, Place
    from placekeep.domain.ports.backend import RecordBackend
    from placekeep.domain.stores import PlaceStore

log = getLogger(__name__)

TOGGLEABLE_FLAGS = frozenset({RelationshipFlag.ON_WISHLIST, RelationshipFlag.FAVORITE})


@dataclass(slots=True)
class LibraryService:
    places: PlaceStore
    backend: RecordBackend
    connectivity: ConnectivitySignal
    coordinator: OptimisticCoordinator[object] = field(init=False)

    def __post_init__(self) -> None:
        self.coordinator = OptimisticCoordinator([StoreBinding(self.places)])

    async def refresh(self, bounds: GeoBounds | None = None, *, limit: int | None = None) -> int:
        """Pull summaries for ``bounds`` and merge them as one sweep."""

        self._require_online("refresh places")
        summaries = await self.backend.fetch_summaries(SummaryScope(bounds=bounds, limit=limit))
        merged = self.places.bulk_refresh(summaries, RecordKind.SUMMARY)
        log.info("Refreshed %s of %s summaries", len(merged), len(summaries))
        return len(merged)

    async def load_details(self, external_id: str) -> Place | None:
        """Merge the full server record, reviews included."""

        self._require_online("load place details")
        record = await self.backend.fetch_detailed_record(external_id)
        if record is None:
            return self.places.get(external_id)
        return self.places.upsert(record)

    async def ensure_provider_details(self, external_id: str) -> Place | None:
        """Fill in phone, website, rating and opening hours from the provider."""

        place = self.places.get(external_id)
        if place is not None and place.phone and place.website and place.opening_hours:
            return place
        self._require_online("fetch provider details")
        record = await self.backend.fetch_place_details(external_id)
        if record is None:
            return place
        return self.places.upsert(record)

    async def toggle(self, external_id: str, flag: RelationshipFlag) -> Place:
        """Flip a wishlist / favorite flag optimistically."""

        if flag not in TOGGLEABLE_FLAGS:
            raise ValueError(f"{flag} cannot be toggled directly")
        place = self.places.require(external_id)
        self._require_online(f"update {flag}")
        value = not place.flag(flag)

        async def persist() -> None:
            if not await self.backend.set_relationship_flag(place, flag, value):
                raise ConflictOrServerError(f"Backend refused to set {flag} on {external_id}")

        await self.coordinator.run(lambda: self.places.set_flag(external_id, flag, value), persist)
        return self.places.require(external_id)

    def search_cached(
        self, bounds: GeoBounds, *, origin: Coordinates | None = None
    ) -> list[Place]:
        """Offline search over places already in the store."""

        return self.places.within(bounds, origin=origin or bounds.center)

    def _require_online(self, action: str) -> None:
        if not self.connectivity.online:
            raise TransientNetworkError(f"Cannot {action} while offline")
