"""Itinerary store: stop order, membership and notes per group."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.errors import PlaceKeepError
from placekeep.domain.merge import merge
from placekeep.domain.model import GroupContext, ResolvedStop

from .base import StateContainer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from placekeep.domain.model import Itinerary, ItineraryStop

    from .places import PlaceStore

log = getLogger(__name__)

type ItineraryTable = Mapping[int, Itinerary]


class ItineraryStore(StateContainer[ItineraryTable]):
    def __init__(self) -> None:
        super().__init__({})

    def get(self, group_id: int) -> Itinerary | None:
        return self.state.get(group_id)

    def require(self, group_id: int) -> Itinerary:
        itinerary = self.get(group_id)
        if itinerary is None:
            raise PlaceKeepError(f"Unknown itinerary: {group_id}")
        return itinerary

    def all(self) -> list[Itinerary]:
        return list(self.state.values())

    def put(self, itinerary: Itinerary) -> None:
        self._commit({**self.state, itinerary.group_id: itinerary})

    def put_all(self, itineraries: Iterable[Itinerary]) -> None:
        table = dict(self.state)
        for itinerary in itineraries:
            table[itinerary.group_id] = itinerary
        self._commit(table)

    def remove(self, group_id: int) -> Itinerary:
        itinerary = self.require(group_id)
        self._commit({key: value for key, value in self.state.items() if key != group_id})
        return itinerary

    def add_stop(self, group_id: int, stop: ItineraryStop) -> Itinerary:
        return self._update(group_id, lambda itinerary: itinerary.with_stop(stop))

    def reorder(self, group_id: int, ordered_ids: Iterable[str]) -> Itinerary:
        ordered = tuple(ordered_ids)
        return self._update(group_id, lambda itinerary: itinerary.reordered(ordered))

    def remove_stop(self, group_id: int, external_id: str) -> Itinerary:
        return self._update(group_id, lambda itinerary: itinerary.without(external_id))

    def set_note(self, group_id: int, external_id: str, text: str | None) -> Itinerary:
        itinerary = self.require(group_id)
        if external_id not in itinerary.stop_ids:
            raise PlaceKeepError(f"Place {external_id} is not part of itinerary {group_id}")
        return self._update(group_id, lambda current: current.with_note(external_id, text))

    def resolve(self, group_id: int, places: PlaceStore) -> list[ResolvedStop]:
        """Render stops against ``places``.

        Order, notes and group context come from the itinerary; every other
        attribute comes from the current place store entry. A stop whose place
        is not cached falls back to the record embedded with it, and is
        skipped only when it has none.
        """

        itinerary = self.require(group_id)
        context = GroupContext(
            group_id=itinerary.group_id, name=itinerary.name, on_date=itinerary.on_date
        )
        resolved: list[ResolvedStop] = []
        for stop in itinerary.stops:
            place = places.get(stop.external_id)
            if place is None and stop.source is not None:
                place = merge(stop.source)
            if place is None:
                log.debug("Itinerary %s stop %s has no place data", group_id, stop.external_id)
                continue
            resolved.append(
                ResolvedStop(
                    position=len(resolved),
                    place=replace(place, group=context),
                    notes=stop.notes,
                )
            )
        return resolved

    def observe(self, places: PlaceStore) -> Callable[[], None]:
        """Re-notify itinerary subscribers whenever the place store changes."""

        def relay(_table: object) -> None:
            for listener in tuple(self._listeners):
                listener(self.state)

        return places.subscribe(relay)

    def _update(self, group_id: int, change: Callable[[Itinerary], Itinerary]) -> Itinerary:
        updated = change(self.require(group_id))
        self._commit({**self.state, group_id: updated})
        return updated
