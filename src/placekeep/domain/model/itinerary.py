"""Itineraries: dated, ordered groups of places with per-stop notes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING

from .place import Place  # noqa: TC001

if TYPE_CHECKING:
    from placekeep.domain.merge import SourceRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class ItineraryStop:
    """One stop; ``source`` is the place record the backend embedded with it, if any."""

    external_id: str
    notes: str | None = None
    source: SourceRecord | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Itinerary:
    group_id: int
    name: str | None = None
    on_date: date | None = None
    stops: tuple[ItineraryStop, ...] = ()

    @property
    def stop_ids(self) -> tuple[str, ...]:
        return tuple(stop.external_id for stop in self.stops)

    def reordered(self, ordered_ids: tuple[str, ...]) -> Itinerary:
        """Return a copy with stops in ``ordered_ids`` order.

        Stops not named in ``ordered_ids`` keep their relative order at the end.
        """

        by_id = {stop.external_id: stop for stop in self.stops}
        ordered = [by_id[ref] for ref in dict.fromkeys(ordered_ids) if ref in by_id]
        named = {stop.external_id for stop in ordered}
        ordered.extend(stop for stop in self.stops if stop.external_id not in named)
        return replace(self, stops=tuple(ordered))

    def with_stop(self, stop: ItineraryStop) -> Itinerary:
        if stop.external_id in self.stop_ids:
            return self
        return replace(self, stops=(*self.stops, stop))

    def without(self, external_id: str) -> Itinerary:
        return replace(
            self, stops=tuple(stop for stop in self.stops if stop.external_id != external_id)
        )

    def with_note(self, external_id: str, text: str | None) -> Itinerary:
        notes = text if text and text.strip() else None
        return replace(
            self,
            stops=tuple(
                replace(stop, notes=notes) if stop.external_id == external_id else stop
                for stop in self.stops
            ),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolvedStop:
    """A stop rendered against the current place store."""

    position: int
    place: Place
    notes: str | None
