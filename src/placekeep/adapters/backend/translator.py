"""Classify raw place payloads and translate them into record variants.

Shape detection looks at a fixed set of keys, in this order:

1. ``visits`` present: detailed record (even if flags are present too)
2. any of ``user_visited`` / ``on_wishlist`` / ``is_favorite``: summary
3. ``geometry`` plus ``place_id`` / ``google_place_id``: provider result
4. ``created_at``: persisted row
"""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from pydantic import ValidationError

from placekeep.domain.merge import (
    DetailedRecord,
    PersistedRecord,
    ProviderPlaceRecord,
    SummaryRecord,
)
from placekeep.domain.model import (
    Coordinates,
    GroupContext,
    Itinerary,
    ItineraryStop,
    RecordKind,
    RelationshipFlag,
    Review,
)

from .schema import (
    DetailedPlacePayload,
    ItineraryPayload,
    PersistedPlacePayload,
    PlacePayload,
    RelationshipPayload,
    ReviewPayload,
)

if TYPE_CHECKING:
    from placekeep.domain.merge import SourceRecord

log = getLogger(__name__)

FLAG_FIELDS: Mapping[str, RelationshipFlag] = {
    "user_visited": RelationshipFlag.VISITED,
    "on_wishlist": RelationshipFlag.ON_WISHLIST,
    "is_favorite": RelationshipFlag.FAVORITE,
}
REVIEW_COLLECTION_FIELD = "visits"
GROUP_FIELD = "trip_id"


def detect_kind(raw: Mapping[str, object]) -> RecordKind | None:
    if REVIEW_COLLECTION_FIELD in raw:
        return RecordKind.DETAILED
    if any(name in raw for name in FLAG_FIELDS):
        return RecordKind.SUMMARY
    if "geometry" in raw and ("place_id" in raw or "google_place_id" in raw):
        return RecordKind.PROVIDER
    if "created_at" in raw:
        return RecordKind.PERSISTED
    return None


def classify_record(raw: object) -> SourceRecord | None:
    """Turn one raw payload into a record variant, or ``None`` when unrecognised."""

    if not isinstance(raw, Mapping):
        log.warning("Ignoring non-object place payload: %r", raw)
        return None
    mapping = cast(Mapping[str, object], raw)
    kind = detect_kind(mapping)
    if kind is None:
        log.warning("Unrecognised place payload with keys %s", sorted(mapping))
        return None
    try:
        match kind:
            case RecordKind.DETAILED:
                return _detailed(DetailedPlacePayload.model_validate(mapping))
            case RecordKind.SUMMARY:
                return _summary(RelationshipPayload.model_validate(mapping))
            case RecordKind.PROVIDER:
                return ProviderPlaceRecord(**_common(PlacePayload.model_validate(mapping)))
            case RecordKind.PERSISTED:
                payload = PersistedPlacePayload.model_validate(mapping)
                return PersistedRecord(**_common(payload), created_at=payload.created_at)
    except ValidationError as exc:
        log.warning("Invalid %s place payload: %s", kind, exc)
        return None


def classify_records(raws: object) -> list[SourceRecord]:
    if not isinstance(raws, list):
        log.warning("Expected a list of place payloads, got %s", type(raws).__name__)
        return []
    records: list[SourceRecord] = []
    for raw in cast(list[object], raws):
        record = classify_record(raw)
        if record is not None:
            records.append(record)
    return records


def translate_review(payload: ReviewPayload) -> Review:
    return Review(
        id=str(payload.id),
        visited_on=payload.visit_date,
        rating=payload.rating,
        text=payload.user_review,
        photos=tuple(payload.photos),
    )


def translate_itinerary(payload: ItineraryPayload) -> Itinerary:
    return Itinerary(
        group_id=payload.id,
        name=payload.name,
        on_date=payload.trip_date,
        stops=tuple(
            ItineraryStop(
                external_id=stop.google_place_id,
                notes=stop.notes,
                source=classify_record(stop.place) if stop.place is not None else None,
            )
            for stop in payload.places
        ),
    )


def _coordinates(payload: PlacePayload) -> Coordinates | None:
    location = payload.geometry.location if payload.geometry else None
    if location is not None and location.lat is not None and location.lng is not None:
        return Coordinates(latitude=location.lat, longitude=location.lng)
    if payload.latitude is not None and payload.longitude is not None:
        return Coordinates(latitude=payload.latitude, longitude=payload.longitude)
    return None


def _common(payload: PlacePayload) -> dict[str, Any]:
    external_id = payload.google_place_id
    if external_id is None and isinstance(payload.id, str):
        external_id = payload.id
    hours = payload.opening_hours.weekday_text if payload.opening_hours else None
    return {
        "external_id": external_id,
        "internal_id": payload.id if isinstance(payload.id, int) else None,
        "name": payload.name,
        "coordinates": _coordinates(payload),
        "address": payload.address,
        "phone": payload.phone,
        "website": payload.website,
        "rating": payload.rating,
        "opening_hours": tuple(hours) if hours else None,
        "reservable": payload.reservable,
    }


def _flags(payload: RelationshipPayload) -> dict[RelationshipFlag, bool]:
    flags: dict[RelationshipFlag, bool] = {}
    for name, flag in FLAG_FIELDS.items():
        value = getattr(payload, name)
        if value is not None:
            flags[flag] = value
    return flags


def _summary(payload: RelationshipPayload) -> SummaryRecord:
    return SummaryRecord(**_common(payload), flags=_flags(payload))


def _detailed(payload: DetailedPlacePayload) -> DetailedRecord:
    group: GroupContext | None = None
    if payload.trip_id is not None:
        group = GroupContext(
            group_id=payload.trip_id, name=payload.trip_name, on_date=payload.trip_date
        )
    return DetailedRecord(
        **_common(payload),
        flags=_flags(payload),
        reviews=tuple(translate_review(review) for review in payload.visits),
        group=group,
        clears_group=GROUP_FIELD in payload.model_fields_set and payload.trip_id is None,
    )
