"""HTTP client for the record backend (PostgREST-style RPC endpoints)."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Unpack, cast

from placekeep.adapters.http_resilience import ResilienceConfig, ResilientClient
from placekeep.config.backend import BackendConfig, get_backend_config
from placekeep.domain.merge import DetailedRecord, ProviderPlaceRecord, SummaryRecord
from placekeep.domain.model import CreatedRecord
from placekeep.domain.ports.backend import RecordBackend

from .schema import CreatedReviewPayload, FlagResultPayload, ItineraryPayload, ReviewPayload
from .translator import classify_record, classify_records, translate_itinerary, translate_review
from .transport import json_body, parse, send

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import date

    from placekeep.adapters.http_resilience import RequestOptions
    from placekeep.domain.model import (
        Itinerary,
        Place,
        RelationshipFlag,
        Review,
        ReviewDraft,
        ReviewPatch,
    )
    from placekeep.domain.ports.backend import ItineraryPatch, SummaryScope

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def place_to_wire(place: Place) -> dict[str, object]:
    return {
        "id": place.internal_id,
        "google_place_id": place.external_id,
        "name": place.name,
        "address": place.address,
        "latitude": place.coordinates.latitude,
        "longitude": place.coordinates.longitude,
        "phone": place.phone,
        "website": place.website,
        "google_rating": place.rating,
    }


def _draft_to_wire(draft: ReviewDraft, photo_paths: Sequence[str]) -> dict[str, object]:
    return {
        "visit_date": draft.visited_on.isoformat(),
        "rating": draft.rating,
        "user_review": draft.text,
        "photos": list(photo_paths),
    }


def _patch_to_wire(patch: ReviewPatch) -> dict[str, object]:
    body: dict[str, object] = {}
    if patch.visited_on is not None:
        body["visit_date"] = patch.visited_on.isoformat()
    if patch.rating is not None:
        body["rating"] = patch.rating
    if patch.text is not None:
        body["user_review"] = patch.text
    return body


def _itinerary_patch_to_wire(patch: ItineraryPatch) -> dict[str, object]:
    body: dict[str, object] = {}
    if patch.order is not None:
        body["place_order"] = list(patch.order)
    if patch.add is not None:
        body["add_place"] = place_to_wire(patch.add)
    if patch.remove is not None:
        body["remove_place_id"] = patch.remove
    if patch.notes:
        body["notes"] = [
            {"google_place_id": external_id, "notes": text}
            for external_id, text in patch.notes.items()
        ]
    return body


@dataclass(slots=True)
class HttpRecordBackend:
    config: BackendConfig = field(default_factory=get_backend_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def create_record(
        self, place: Place, draft: ReviewDraft, photo_paths: Sequence[str]
    ) -> CreatedRecord:
        action = "log_review"
        payload = await self._rpc(
            action,
            {
                "p_place_data": place_to_wire(place),
                "p_review_data": _draft_to_wire(draft, photo_paths),
            },
        )
        created = parse(CreatedReviewPayload, payload, action=action)
        return CreatedRecord(record_id=str(created.review_id), place_internal_id=created.place_id)

    async def update_record(self, record_id: str, patch: ReviewPatch) -> Review:
        action = f"update review {record_id}"
        payload = await self._request(
            "PATCH", f"reviews/{record_id}", action=action, json=_patch_to_wire(patch)
        )
        return translate_review(parse(ReviewPayload, payload, action=action))

    async def delete_record(self, record_id: str) -> bool:
        action = f"delete review {record_id}"
        payload = await self._request("DELETE", f"reviews/{record_id}", action=action)
        return parse(FlagResultPayload, payload, action=action).success

    async def fetch_summaries(self, scope: SummaryScope) -> list[SummaryRecord]:
        body: dict[str, object] = {}
        if scope.bounds is not None:
            body.update(
                {
                    "min_lat": scope.bounds.south,
                    "min_lng": scope.bounds.west,
                    "max_lat": scope.bounds.north,
                    "max_lng": scope.bounds.east,
                }
            )
        if scope.limit is not None:
            body["p_limit"] = scope.limit
        payload = await self._rpc("get_places_in_bounds", body)
        summaries: list[SummaryRecord] = []
        for record in classify_records(payload):
            if isinstance(record, SummaryRecord):
                summaries.append(record)
            else:
                log.warning("Summary refresh returned a %s record; skipped", record.kind)
        return summaries

    async def fetch_detailed_record(self, external_id: str) -> DetailedRecord | None:
        payload = await self._rpc("get_place_details", {"p_place_id": external_id})
        if payload is None:
            return None
        record = classify_record(payload)
        if not isinstance(record, DetailedRecord):
            log.warning("Details for %s were not a detailed record", external_id)
            return None
        return record

    async def set_relationship_flag(
        self,
        place: Place,
        flag: RelationshipFlag,
        value: bool,  # noqa: FBT001
    ) -> bool:
        action = "set_relationship_flag"
        payload = await self._rpc(
            action,
            {"p_place_data": place_to_wire(place), "p_flag": flag.value, "p_value": value},
        )
        return parse(FlagResultPayload, payload, action=action).success

    async def fetch_place_details(self, external_id: str) -> ProviderPlaceRecord | None:
        payload = await self._request(
            "GET",
            f"places/{external_id}/details",
            action=f"fetch provider details for {external_id}",
            resilience=self.config.details,
        )
        if payload is None:
            return None
        record = classify_record(payload)
        if not isinstance(record, ProviderPlaceRecord):
            log.warning("Provider details for %s had an unexpected shape", external_id)
            return None
        return record

    async def fetch_itineraries(self, on_date: date) -> list[Itinerary]:
        action = "get_itineraries_for_date"
        payload = await self._rpc(action, {"p_date": on_date.isoformat()})
        if not isinstance(payload, list):
            return []
        return [
            translate_itinerary(parse(ItineraryPayload, item, action=action))
            for item in cast(list[object], payload)
        ]

    async def create_itinerary(self, name: str, on_date: date) -> Itinerary:
        action = "create itinerary"
        payload = await self._request(
            "POST",
            "itineraries",
            action=action,
            json={"name": name, "trip_date": on_date.isoformat()},
        )
        return translate_itinerary(parse(ItineraryPayload, payload, action=action))

    async def update_itinerary(self, group_id: int, patch: ItineraryPatch) -> Itinerary:
        action = f"update itinerary {group_id}"
        payload = await self._request(
            "PATCH",
            f"itineraries/{group_id}",
            action=action,
            json=_itinerary_patch_to_wire(patch),
        )
        return translate_itinerary(parse(ItineraryPayload, payload, action=action))

    async def delete_itinerary(self, group_id: int) -> bool:
        action = f"delete itinerary {group_id}"
        payload = await self._request("DELETE", f"itineraries/{group_id}", action=action)
        return parse(FlagResultPayload, payload, action=action).success

    async def _rpc(self, name: str, body: dict[str, object]) -> object:
        return await self._request("POST", f"rpc/{name}", action=name, json=body)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        action: str,
        resilience: ResilienceConfig | None = None,
        **kwargs: Unpack[RequestOptions],
    ) -> object:
        async with self.client_factory(resilience or self.config.rpc) as client:
            response = await send(client, method, url, action=action, **kwargs)
            return json_body(response, action=action)


if TYPE_CHECKING:
    _backend_check: RecordBackend = HttpRecordBackend()
