"""Field-precedence merge of one source record into an existing place."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.model import Place, RelationshipFlag

from .records import DetailedRecord, SummaryRecord

if TYPE_CHECKING:
    from placekeep.domain.model import Coordinates, GroupContext, Review

    from .records import SourceRecord

log = getLogger(__name__)


def _pick[T](incoming: T | None, current: T | None) -> T | None:
    return incoming if incoming is not None else current


def _pick_text(incoming: str | None, current: str | None) -> str | None:
    if incoming is not None and incoming.strip():
        return incoming
    return current


def _valid(coordinates: Coordinates | None) -> Coordinates | None:
    if coordinates is None or not coordinates.is_valid():
        return None
    return coordinates


def _resolve_flag(
    source: SourceRecord, existing: Place | None, flag: RelationshipFlag
) -> bool:
    if isinstance(source, (SummaryRecord, DetailedRecord)) and flag in source.flags:
        return source.flags[flag]
    return existing.flag(flag) if existing is not None else False


def _resolve_reviews(
    source: SourceRecord, existing: Place | None, *, visited: bool
) -> tuple[Review, ...]:
    current = existing.reviews if existing is not None else ()
    if not isinstance(source, (SummaryRecord, DetailedRecord)):
        return current
    if isinstance(source, DetailedRecord) and source.reviews:
        return source.reviews
    if RelationshipFlag.VISITED in source.flags and not visited:
        return ()
    return current


def _resolve_group(source: SourceRecord, existing: Place | None) -> GroupContext | None:
    current = existing.group if existing is not None else None
    if not isinstance(source, DetailedRecord):
        return current
    if source.clears_group:
        return None
    return current if current is not None else source.group


def _merge_place(source: Place, existing: Place | None) -> Place:
    if existing is None or source.internal_id is not None:
        return source
    return replace(source, internal_id=existing.internal_id)


def merge(source: SourceRecord | Place, existing: Place | None = None) -> Place | None:
    """Merge ``source`` over ``existing`` and return the resulting place.

    Returns ``None`` when no external id, name or valid coordinates can be
    resolved from either side. A ``Place`` source is authoritative for every
    field except a missing internal id.
    """

    if isinstance(source, Place):
        return _merge_place(source, existing)

    external_id = _pick_text(source.external_id, existing.external_id if existing else None)
    name = _pick_text(source.name, existing.name if existing else None)
    coordinates = _valid(source.coordinates) or _valid(
        existing.coordinates if existing else None
    )
    if external_id is None or name is None or coordinates is None:
        log.warning(
            "Rejected %s record external_id=%s: name=%r coordinates=%s",
            source.kind,
            external_id,
            name,
            source.coordinates,
        )
        return None

    visited = _resolve_flag(source, existing, RelationshipFlag.VISITED)
    return Place(
        external_id=external_id,
        internal_id=_pick(source.internal_id, existing.internal_id if existing else None),
        name=name,
        coordinates=coordinates,
        address=_pick_text(source.address, existing.address if existing else None),
        phone=_pick_text(source.phone, existing.phone if existing else None),
        website=_pick_text(source.website, existing.website if existing else None),
        rating=_pick(source.rating, existing.rating if existing else None),
        opening_hours=_pick(source.opening_hours, existing.opening_hours if existing else None)
        or (),
        reservable=_pick(source.reservable, existing.reservable if existing else None),
        visited=visited,
        on_wishlist=_resolve_flag(source, existing, RelationshipFlag.ON_WISHLIST),
        favorite=_resolve_flag(source, existing, RelationshipFlag.FAVORITE),
        reviews=_resolve_reviews(source, existing, visited=visited),
        group=_resolve_group(source, existing),
    )
