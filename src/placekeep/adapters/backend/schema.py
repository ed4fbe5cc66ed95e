"""Pydantic models describing backend and provider place payloads."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _lenient_float(value: object) -> object:
    """Unparseable coordinates become NaN so the merge can reject or fall back."""

    if value is None:
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return math.nan


class PlaceKeepBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LocationPayload(PlaceKeepBaseModel):
    lat: float | None = None
    lng: float | None = None

    _normalize_coordinates = field_validator("lat", "lng", mode="before")(_lenient_float)


class GeometryPayload(PlaceKeepBaseModel):
    location: LocationPayload | None = None


class OpeningHoursPayload(PlaceKeepBaseModel):
    weekday_text: list[str] = Field(default_factory=list)


class PlacePayload(PlaceKeepBaseModel):
    """Fields shared by every place shape, accepting provider and backend spellings."""

    google_place_id: str | None = Field(
        default=None, validation_alias=AliasChoices("google_place_id", "place_id")
    )
    id: int | str | None = None
    name: str | None = None
    address: str | None = Field(
        default=None, validation_alias=AliasChoices("formatted_address", "address")
    )
    phone: str | None = Field(
        default=None, validation_alias=AliasChoices("international_phone_number", "phone")
    )
    website: str | None = None
    rating: float | None = Field(
        default=None, validation_alias=AliasChoices("rating", "google_rating")
    )
    geometry: GeometryPayload | None = None
    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float | None = Field(
        default=None, validation_alias=AliasChoices("longitude", "lng")
    )
    opening_hours: OpeningHoursPayload | None = None
    reservable: bool | None = None

    _normalize_text = field_validator(
        "google_place_id", "name", "address", "phone", "website", mode="before"
    )(_blank_to_none)
    _normalize_coordinates = field_validator("latitude", "longitude", mode="before")(
        _lenient_float
    )


class RelationshipPayload(PlacePayload):
    user_visited: bool | None = None
    on_wishlist: bool | None = None
    is_favorite: bool | None = None


class ReviewPayload(PlaceKeepBaseModel):
    id: int | str
    visit_date: date | None = None
    rating: int | None = None
    user_review: str | None = None
    photos: list[str] = Field(default_factory=list)

    _normalize_review = field_validator("user_review", mode="before")(_blank_to_none)

    @field_validator("photos", mode="before")
    @classmethod
    def _null_photos(cls, value: object) -> object:
        return [] if value is None else value


class DetailedPlacePayload(RelationshipPayload):
    visits: list[ReviewPayload] = Field(default_factory=list)
    trip_id: int | None = None
    trip_name: str | None = None
    trip_date: date | None = None

    @field_validator("visits", mode="before")
    @classmethod
    def _null_visits(cls, value: object) -> object:
        return [] if value is None else value


class PersistedPlacePayload(PlacePayload):
    created_at: datetime | None = None


class CreatedReviewPayload(PlaceKeepBaseModel):
    review_id: int | str
    place_id: int | None = None


class FlagResultPayload(PlaceKeepBaseModel):
    success: bool


class ItineraryStopPayload(PlaceKeepBaseModel):
    google_place_id: str = Field(validation_alias=AliasChoices("google_place_id", "place_id"))
    notes: str | None = None
    place: dict[str, Any] | None = Field(
        default=None, validation_alias=AliasChoices("place", "winery", "wineries")
    )

    _normalize_notes = field_validator("notes", mode="before")(_blank_to_none)


class ItineraryPayload(PlaceKeepBaseModel):
    id: int
    name: str | None = None
    trip_date: date | None = None
    places: list[ItineraryStopPayload] = Field(default_factory=list)


class SignedUrlPayload(PlaceKeepBaseModel):
    signed_url: str = Field(validation_alias=AliasChoices("signedURL", "signedUrl", "signed_url"))
