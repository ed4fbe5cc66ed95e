"""Canonical place entity and its child review records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date  # noqa: TC003

from placekeep.config.sync import TEMP_ID_PREFIX

from .enums import RelationshipFlag
from .primitives import Coordinates  # noqa: TC001


def is_temporary_id(value: str) -> bool:
    return value.startswith(TEMP_ID_PREFIX)


@dataclass(frozen=True, slots=True, kw_only=True)
class Review:
    """A user's recorded visit to a place."""

    id: str
    visited_on: date | None = None
    rating: int | None = None
    text: str | None = None
    photos: tuple[str, ...] = ()

    @property
    def is_tentative(self) -> bool:
        return is_temporary_id(self.id)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReviewPatch:
    visited_on: date | None = None
    rating: int | None = None
    text: str | None = None

    def apply(self, review: Review) -> Review:
        return replace(
            review,
            visited_on=self.visited_on if self.visited_on is not None else review.visited_on,
            rating=self.rating if self.rating is not None else review.rating,
            text=self.text if self.text is not None else review.text,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class GroupContext:
    """Itinerary the place currently belongs to."""

    group_id: int
    name: str | None = None
    on_date: date | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Place:
    """Merged view of everything known about one real-world place.

    ``external_id`` is the provider's identifier and the canonical key.
    ``internal_id`` is assigned by the backend once the place is persisted there.
    """

    external_id: str
    name: str
    coordinates: Coordinates
    internal_id: int | None = None
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    rating: float | None = None
    opening_hours: tuple[str, ...] = ()
    reservable: bool | None = None
    visited: bool = False
    on_wishlist: bool = False
    favorite: bool = False
    reviews: tuple[Review, ...] = field(default_factory=tuple)
    group: GroupContext | None = None

    def flag(self, flag: RelationshipFlag) -> bool:
        match flag:
            case RelationshipFlag.VISITED:
                return self.visited
            case RelationshipFlag.ON_WISHLIST:
                return self.on_wishlist
            case RelationshipFlag.FAVORITE:
                return self.favorite

    def with_flag(self, flag: RelationshipFlag, value: bool) -> Place:  # noqa: FBT001
        match flag:
            case RelationshipFlag.VISITED:
                return replace(self, visited=value)
            case RelationshipFlag.ON_WISHLIST:
                return replace(self, on_wishlist=value)
            case RelationshipFlag.FAVORITE:
                return replace(self, favorite=value)

    def find_review(self, review_id: str) -> Review | None:
        for review in self.reviews:
            if review.id == review_id:
                return review
        return None
