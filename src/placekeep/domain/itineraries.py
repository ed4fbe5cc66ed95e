"""Optimistic itinerary edits."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.errors import ConflictOrServerError, TransientNetworkError
from placekeep.domain.model import GroupContext, Itinerary, ItineraryStop
from placekeep.domain.optimistic import OptimisticCoordinator, StoreBinding
from placekeep.domain.ports.backend import ItineraryPatch

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import date

    from placekeep.domain.connectivity import ConnectivitySignal
    from placekeep.domain.model import ResolvedStop
    from placekeep.domain.ports.backend import RecordBackend
    from placekeep.domain.stores import ItineraryStore, PlaceStore

log = getLogger(__name__)

DEFAULT_ITINERARY_NAME = "New trip"


@dataclass(slots=True)
class ItineraryService:
    """Create, delete and edit itineraries.

    Each edit is applied to the itinerary store first and sent to the backend
    afterwards; a failed call restores order, membership and notes verbatim.
    Removing a stop also clears the place's group context when it pointed at
    the edited itinerary.
    """

    itineraries: ItineraryStore
    places: PlaceStore
    backend: RecordBackend
    connectivity: ConnectivitySignal
    coordinator: OptimisticCoordinator[Itinerary] = field(init=False)

    def __post_init__(self) -> None:
        self.coordinator = OptimisticCoordinator(
            [
                StoreBinding(self.itineraries, self._replace_itinerary),
                StoreBinding(self.places),
            ]
        )

    async def load(self, on_date: date) -> list[Itinerary]:
        """Fetch the day's itineraries and merge the places embedded in their stops."""

        self._require_online()
        itineraries = await self.backend.fetch_itineraries(on_date)
        self.itineraries.put_all(itineraries)
        self.places.merge_embedded(
            stop.source
            for itinerary in itineraries
            for stop in itinerary.stops
            if stop.source is not None
        )
        return itineraries

    async def create(self, on_date: date, name: str = DEFAULT_ITINERARY_NAME) -> Itinerary:
        """Create an empty itinerary; the group id comes from the backend."""

        self._require_online()
        created = await self.backend.create_itinerary(name, on_date)
        self.itineraries.put(created)
        log.info("Created itinerary %s for %s", created.group_id, on_date)
        return created

    async def delete(self, group_id: int) -> None:
        self._require_online()
        self.itineraries.require(group_id)

        def mutate() -> None:
            self.itineraries.remove(group_id)
            for place in self.places.all():
                if place.group is not None and place.group.group_id == group_id:
                    self.places.set_group_context(place.external_id, None)

        async def delete() -> None:
            if not await self.backend.delete_itinerary(group_id):
                raise ConflictOrServerError(f"Backend refused to delete itinerary {group_id}")

        await self.coordinator.run(mutate, delete, temp_id=str(group_id))
        log.info("Deleted itinerary %s", group_id)

    async def add_stop(self, group_id: int, external_id: str) -> Itinerary:
        """Append a place; it takes this group as context unless it already has one."""

        self._require_online()
        place = self.places.require(external_id)
        itinerary = self.itineraries.require(group_id)
        context = GroupContext(
            group_id=itinerary.group_id, name=itinerary.name, on_date=itinerary.on_date
        )

        def mutate() -> None:
            self.itineraries.add_stop(group_id, ItineraryStop(external_id=external_id))
            if place.group is None:
                self.places.set_group_context(external_id, context)

        return await self._apply(group_id, mutate, ItineraryPatch(add=place))

    async def reorder(self, group_id: int, ordered_ids: Sequence[str]) -> Itinerary:
        self._require_online()
        order = tuple(ordered_ids)
        return await self._apply(
            group_id,
            lambda: self.itineraries.reorder(group_id, order),
            ItineraryPatch(order=order),
        )

    async def remove_stop(self, group_id: int, external_id: str) -> Itinerary:
        self._require_online()

        def mutate() -> None:
            self.itineraries.remove_stop(group_id, external_id)
            place = self.places.get(external_id)
            if place is not None and place.group is not None and place.group.group_id == group_id:
                self.places.set_group_context(external_id, None)

        return await self._apply(group_id, mutate, ItineraryPatch(remove=external_id))

    async def set_note(self, group_id: int, external_id: str, text: str | None) -> Itinerary:
        self._require_online()
        return await self._apply(
            group_id,
            lambda: self.itineraries.set_note(group_id, external_id, text),
            ItineraryPatch(notes={external_id: text}),
        )

    def resolve(self, group_id: int) -> list[ResolvedStop]:
        return self.itineraries.resolve(group_id, self.places)

    async def _apply(
        self, group_id: int, mutate: Callable[[], object], patch: ItineraryPatch
    ) -> Itinerary:
        self.itineraries.require(group_id)
        updated = await self.coordinator.run(
            mutate,
            lambda: self.backend.update_itinerary(group_id, patch),
            temp_id=str(group_id),
            finalize=lambda itinerary: itinerary,
        )
        log.debug("Itinerary %s updated", group_id)
        return updated

    def _replace_itinerary(self, _key: str, itinerary: Itinerary) -> None:
        self.itineraries.put(itinerary)

    def _require_online(self) -> None:
        if not self.connectivity.online:
            raise TransientNetworkError("Itineraries can only be edited while online")
