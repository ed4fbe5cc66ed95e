"""Canonical in-memory table of merged places."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.errors import PlaceKeepError, UnknownPlaceError
from placekeep.domain.merge import merge
from placekeep.domain.model import Place, RecordKind, RelationshipFlag

from .base import StateContainer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from placekeep.domain.merge import SourceRecord
    from placekeep.domain.model import Coordinates, GeoBounds, GroupContext, Review, ReviewPatch

log = getLogger(__name__)

type PlaceTable = Mapping[str, Place]


class PlaceStore(StateContainer[PlaceTable]):
    """Places keyed by external id, only ever written through merges or child mutations."""

    def __init__(self) -> None:
        super().__init__({})

    # Reads ------------------------------------------------------------------

    def get(self, external_id: str) -> Place | None:
        return self.state.get(external_id)

    def require(self, external_id: str) -> Place:
        place = self.get(external_id)
        if place is None:
            raise UnknownPlaceError(external_id)
        return place

    def all(self) -> list[Place]:
        return list(self.state.values())

    def __len__(self) -> int:
        return len(self.state)

    def __contains__(self, external_id: object) -> bool:
        return external_id in self.state

    def find_by_internal_id(self, internal_id: int) -> Place | None:
        for place in self.state.values():
            if place.internal_id == internal_id:
                return place
        return None

    def find_review(self, review_id: str) -> tuple[Place, Review] | None:
        for place in self.state.values():
            review = place.find_review(review_id)
            if review is not None:
                return place, review
        return None

    def within(self, bounds: GeoBounds, *, origin: Coordinates | None = None) -> list[Place]:
        """Cached places inside ``bounds``, nearest to ``origin`` first when given."""

        matches = [place for place in self.state.values() if bounds.contains(place.coordinates)]
        if origin is not None:
            matches.sort(key=lambda place: origin.distance_miles(place.coordinates))
        return matches

    def visited(self) -> list[Place]:
        return [place for place in self.state.values() if place.visited]

    def favorites(self) -> list[Place]:
        return [place for place in self.state.values() if place.favorite]

    def wishlist(self) -> list[Place]:
        return [place for place in self.state.values() if place.on_wishlist]

    # Merges -----------------------------------------------------------------

    def upsert(self, source: SourceRecord | Place) -> Place | None:
        """Merge ``source`` over the stored place with the same external id."""

        existing = _existing_in(self.state, source)
        merged = merge(source, existing)
        if merged is None:
            return None
        self._commit({**self.state, merged.external_id: merged})
        return merged

    def bulk_refresh(self, sources: Iterable[SourceRecord], kind: RecordKind) -> list[Place]:
        """Merge a refresh sweep; places outside the sweep are left untouched."""

        table = dict(self.state)
        merged_places: list[Place] = []
        rejected = 0
        for source in sources:
            if source.kind is not kind:
                log.warning(
                    "Skipping %s record in %s refresh: %s", source.kind, kind, source.external_id
                )
                rejected += 1
                continue
            existing = _existing_in(table, source)
            merged = merge(source, existing)
            if merged is None:
                rejected += 1
                continue
            table[merged.external_id] = merged
            merged_places.append(merged)
        if rejected:
            log.info("Refresh merged %s places, rejected %s", len(merged_places), rejected)
        self._commit(table)
        return merged_places

    def merge_embedded(self, sources: Iterable[SourceRecord]) -> int:
        """Merge records that arrived inside another payload, such as itinerary stops.

        Any record kind is accepted. A held snapshot receives the same merges.
        """

        records = tuple(sources)

        def absorb(table: PlaceTable) -> PlaceTable:
            updated = dict(table)
            for source in records:
                merged = merge(source, _existing_in(updated, source))
                if merged is not None:
                    updated[merged.external_id] = merged
            return updated

        if records:
            self._rewrite(absorb)
        return len(records)

    def load(self, places: Iterable[Place]) -> int:
        """Replace the whole table, used when restoring a persisted snapshot."""

        if self.has_snapshot:
            raise PlaceKeepError("Cannot load places while an optimistic mutation is pending")
        table = {place.external_id: place for place in places}
        self._commit(table)
        return len(table)

    # Targeted writes --------------------------------------------------------

    def set_flag(self, external_id: str, flag: RelationshipFlag, value: bool) -> Place:  # noqa: FBT001
        return self._update(external_id, lambda place: place.with_flag(flag, value))

    def set_internal_id(self, external_id: str, internal_id: int) -> Place:
        """Record the backend id; also applied to a held rollback snapshot."""

        self.require(external_id)

        def assign(table: PlaceTable) -> PlaceTable:
            current = table.get(external_id)
            if current is None or current.internal_id == internal_id:
                return table
            return {**table, external_id: replace(current, internal_id=internal_id)}

        self._rewrite(assign)
        return self.require(external_id)

    def set_group_context(self, external_id: str, group: GroupContext | None) -> Place:
        """Set or explicitly clear the place's itinerary context."""

        return self._update(external_id, lambda place: replace(place, group=group))

    def add_review(self, external_id: str, review: Review) -> Place:
        return self._update(
            external_id,
            lambda place: replace(place, reviews=(review, *place.reviews), visited=True),
        )

    def update_review(self, review_id: str, patch: ReviewPatch) -> Place:
        place, review = self._require_review(review_id)
        updated = patch.apply(review)
        return self._update(
            place.external_id,
            lambda current: replace(
                current,
                reviews=tuple(
                    updated if item.id == review_id else item for item in current.reviews
                ),
            ),
        )

    def remove_review(self, review_id: str) -> Place:
        place, _ = self._require_review(review_id)

        def drop(current: Place) -> Place:
            remaining = tuple(item for item in current.reviews if item.id != review_id)
            return replace(current, reviews=remaining, visited=bool(remaining))

        return self._update(place.external_id, drop)

    def replace_review(self, review_id: str, review: Review) -> bool:
        """Swap the review with ``review_id`` for ``review`` wherever it is held.

        The held rollback snapshot is rewritten as well, so a later revert of an
        unrelated mutation does not resurrect the replaced review.
        """

        if self.find_review(review_id) is None:
            return False

        def swap(table: PlaceTable) -> PlaceTable:
            result = dict(table)
            for key, place in table.items():
                if place.find_review(review_id) is None:
                    continue
                result[key] = replace(
                    place,
                    reviews=tuple(
                        review if item.id == review_id else item for item in place.reviews
                    ),
                )
            return result

        self._rewrite(swap)
        return True

    def adopt_review(self, place: Place, review: Review) -> Place:
        """Attach a confirmed review whose tentative copy is no longer held.

        ``place`` is inserted first when the store does not know it yet.
        """

        def adopt(table: PlaceTable) -> PlaceTable:
            current = table.get(place.external_id, place)
            if current.find_review(review.id) is not None:
                return table
            adopted = replace(current, reviews=(review, *current.reviews), visited=True)
            return {**table, place.external_id: adopted}

        self._rewrite(adopt)
        return self.require(place.external_id)

    # Helpers ----------------------------------------------------------------

    def _require_review(self, review_id: str) -> tuple[Place, Review]:
        found = self.find_review(review_id)
        if found is None:
            raise PlaceKeepError(f"Unknown review: {review_id}")
        return found

    def _update(self, external_id: str, change: Callable[[Place], Place]) -> Place:
        place = self.require(external_id)
        updated = change(place)
        self._commit({**self.state, external_id: updated})
        return updated


def _existing_in(table: PlaceTable, source: SourceRecord | Place) -> Place | None:
    if source.external_id is not None:
        existing = table.get(source.external_id)
        if existing is not None:
            return existing
    if source.internal_id is not None:
        for place in table.values():
            if place.internal_id == source.internal_id:
                return place
    return None
