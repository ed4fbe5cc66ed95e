from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003
from datetime import date

import httpx
import pytest

from placekeep.adapters.backend import HttpAttachmentStorage, HttpRecordBackend
from placekeep.adapters.http_resilience import ResilienceConfig, ResilientClient
from placekeep.config.backend import BackendConfig
from placekeep.domain.errors import (
    AttachmentStorageError,
    ConflictOrServerError,
    TransientNetworkError,
)
from placekeep.domain.model import GeoBounds, RelationshipFlag, ReviewPatch
from placekeep.domain.ports.backend import ItineraryPatch, SummaryScope
from tests.helpers.places import make_draft, make_place

API_URL = "https://backend.test"


def _config() -> BackendConfig:
    return BackendConfig(
        api_url=API_URL,
        api_key="key",
        owner_id="owner",
        rpc=ResilienceConfig(name="backend", base_url=API_URL),
        details=ResilienceConfig(name="place-details", base_url=API_URL),
    )


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


class _Recorder:
    def __init__(self, responses: dict[str, httpx.Response]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.get(request.url.path, httpx.Response(404, json={"error": "nope"}))

    def body(self, index: int = -1) -> object:
        return json.loads(self.requests[index].content)


def _backend(recorder: _Recorder) -> HttpRecordBackend:
    return HttpRecordBackend(config=_config(), client_factory=_make_client_factory(recorder))


def _storage(recorder: _Recorder) -> HttpAttachmentStorage:
    return HttpAttachmentStorage(config=_config(), client_factory=_make_client_factory(recorder))


def test_create_record_posts_place_and_review() -> None:
    recorder = _Recorder(
        {"/rpc/log_review": httpx.Response(200, json={"review_id": 101, "place_id": 77})}
    )

    created = asyncio.run(
        _backend(recorder).create_record(make_place(), make_draft(), ["owner/g/1-a.jpg"])
    )

    assert created.record_id == "101"
    assert created.place_internal_id == 77
    body = recorder.body()
    assert isinstance(body, dict)
    assert body["p_place_data"]["google_place_id"] == "place-1"  # type: ignore[index]
    assert body["p_review_data"] == {  # type: ignore[index]
        "visit_date": "2024-07-14",
        "rating": 5,
        "user_review": "Lovely terrace",
        "photos": ["owner/g/1-a.jpg"],
    }


def test_fetch_summaries_sends_bounds_and_keeps_summaries_only() -> None:
    recorder = _Recorder(
        {
            "/rpc/get_places_in_bounds": httpx.Response(
                200,
                json=[
                    {
                        "google_place_id": "a",
                        "name": "A",
                        "lat": 42.5,
                        "lng": -76.9,
                        "on_wishlist": True,
                    },
                    {"google_place_id": "b", "name": "B", "created_at": "2024-01-01T00:00:00Z"},
                ],
            )
        }
    )
    bounds = GeoBounds(south=42.0, west=-77.5, north=43.0, east=-76.0)

    summaries = asyncio.run(
        _backend(recorder).fetch_summaries(SummaryScope(bounds=bounds, limit=25))
    )

    assert [record.external_id for record in summaries] == ["a"]
    assert recorder.body() == {
        "min_lat": 42.0,
        "min_lng": -77.5,
        "max_lat": 43.0,
        "max_lng": -76.0,
        "p_limit": 25,
    }


def test_update_and_delete_review() -> None:
    recorder = _Recorder(
        {
            "/reviews/11": httpx.Response(
                200, json={"id": 11, "visit_date": "2024-06-01", "rating": 2, "user_review": "Meh"}
            ),
        }
    )
    backend = _backend(recorder)

    review = asyncio.run(backend.update_record("11", ReviewPatch(rating=2)))

    assert review.rating == 2
    assert recorder.requests[-1].method == "PATCH"
    assert recorder.body() == {"rating": 2}

    recorder.responses["/reviews/11"] = httpx.Response(200, json={"success": True})
    assert asyncio.run(backend.delete_record("11")) is True
    assert recorder.requests[-1].method == "DELETE"


def test_set_relationship_flag_sends_flag_name() -> None:
    recorder = _Recorder(
        {"/rpc/set_relationship_flag": httpx.Response(200, json={"success": False})}
    )

    result = asyncio.run(
        _backend(recorder).set_relationship_flag(
            make_place(), RelationshipFlag.FAVORITE, True  # noqa: FBT003
        )
    )

    assert result is False
    body = recorder.body()
    assert isinstance(body, dict)
    assert body["p_flag"] == RelationshipFlag.FAVORITE.value
    assert body["p_value"] is True


def test_itineraries_round_trip() -> None:
    payload = {
        "id": 9,
        "name": "Seneca loop",
        "trip_date": "2024-08-03",
        "places": [{"google_place_id": "b"}, {"google_place_id": "a", "notes": "Lunch"}],
    }
    recorder = _Recorder(
        {
            "/rpc/get_itineraries_for_date": httpx.Response(200, json=[payload]),
            "/itineraries/9": httpx.Response(200, json=payload),
        }
    )
    backend = _backend(recorder)

    [itinerary] = asyncio.run(backend.fetch_itineraries(date(2024, 8, 3)))
    assert itinerary.stop_ids == ("b", "a")
    assert recorder.body() == {"p_date": "2024-08-03"}

    asyncio.run(
        backend.update_itinerary(9, ItineraryPatch(order=("b", "a"), notes={"a": "Lunch"}))
    )
    assert recorder.body() == {
        "place_order": ["b", "a"],
        "notes": [{"google_place_id": "a", "notes": "Lunch"}],
    }

def test_itinerary_management_requests() -> None:
    created = {"id": 41, "name": "Keuka day", "trip_date": "2024-08-03", "places": []}
    recorder = _Recorder(
        {
            "/itineraries": httpx.Response(201, json=created),
            "/itineraries/41": httpx.Response(200, json={"success": True}),
        }
    )
    backend = _backend(recorder)

    itinerary = asyncio.run(backend.create_itinerary("Keuka day", date(2024, 8, 3)))
    assert itinerary.group_id == 41
    assert recorder.requests[-1].method == "POST"
    assert recorder.body() == {"name": "Keuka day", "trip_date": "2024-08-03"}

    assert asyncio.run(backend.delete_itinerary(41)) is True
    assert recorder.requests[-1].method == "DELETE"


def test_add_stop_patch_sends_place_data() -> None:
    payload = {"id": 9, "places": [{"google_place_id": "place-1"}]}
    recorder = _Recorder({"/itineraries/9": httpx.Response(200, json=payload)})
    place = make_place(internal_id=77)

    updated = asyncio.run(_backend(recorder).update_itinerary(9, ItineraryPatch(add=place)))

    assert updated.stop_ids == ("place-1",)
    body = recorder.body()
    assert isinstance(body, dict)
    assert body["add_place"]["google_place_id"] == "place-1"  # type: ignore[index]
    assert body["add_place"]["id"] == 77  # type: ignore[index]



def test_missing_details_return_none() -> None:
    recorder = _Recorder({"/rpc/get_place_details": httpx.Response(200, content=b"")})

    assert asyncio.run(_backend(recorder).fetch_detailed_record("place-1")) is None


def test_transport_failure_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    backend = HttpRecordBackend(config=_config(), client_factory=_make_client_factory(handler))

    with pytest.raises(TransientNetworkError):
        asyncio.run(backend.fetch_itineraries(date(2024, 8, 3)))


def test_non_transport_request_error_is_a_server_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("redirect loop", request=request)

    backend = HttpRecordBackend(config=_config(), client_factory=_make_client_factory(handler))

    with pytest.raises(ConflictOrServerError, match="TooManyRedirects"):
        asyncio.run(backend.fetch_itineraries(date(2024, 8, 3)))


def test_server_error_carries_status_code() -> None:
    recorder = _Recorder({"/rpc/log_review": httpx.Response(500, text="boom")})

    with pytest.raises(ConflictOrServerError) as excinfo:
        asyncio.run(_backend(recorder).create_record(make_place(), make_draft(), []))

    assert excinfo.value.status_code == 500


def test_storage_upload_and_remove() -> None:
    recorder = _Recorder(
        {
            "/storage/v1/object/review-photos/owner/g/1-a.jpg": httpx.Response(200, json={}),
            "/storage/v1/object/review-photos": httpx.Response(200, json=[]),
        }
    )
    storage = _storage(recorder)

    asyncio.run(storage.store("owner/g/1-a.jpg", b"jpeg", content_type="image/jpeg"))
    upload = recorder.requests[-1]
    assert upload.content == b"jpeg"
    assert upload.headers["x-upsert"] == "false"
    assert upload.headers["content-type"] == "image/jpeg"

    asyncio.run(storage.remove(["owner/g/1-a.jpg"]))
    assert recorder.body() == {"prefixes": ["owner/g/1-a.jpg"]}

    asyncio.run(storage.remove([]))
    assert len(recorder.requests) == 2


def test_storage_rejection_maps_to_storage_error() -> None:
    recorder = _Recorder({})
    storage = _storage(recorder)

    with pytest.raises(AttachmentStorageError):
        asyncio.run(storage.store("owner/g/1-a.jpg", b"jpeg"))
    with pytest.raises(AttachmentStorageError):
        asyncio.run(storage.remove(["owner/g/1-a.jpg"]))


def test_signed_urls_are_made_absolute() -> None:
    recorder = _Recorder(
        {
            "/storage/v1/object/sign/review-photos/owner/g/1-a.jpg": httpx.Response(
                200, json={"signedURL": "/object/sign/review-photos/owner/g/1-a.jpg?token=t"}
            ),
            "/storage/v1/object/sign/review-photos/owner/g/2-b.jpg": httpx.Response(
                200, json={"signedUrl": "https://cdn.test/2-b.jpg?token=t"}
            ),
        }
    )
    storage = _storage(recorder)

    relative = asyncio.run(storage.create_temporary_access_url("owner/g/1-a.jpg", 300))
    absolute = asyncio.run(storage.create_temporary_access_url("owner/g/2-b.jpg", 300))

    assert relative == f"{API_URL}/storage/v1/object/sign/review-photos/owner/g/1-a.jpg?token=t"
    assert absolute == "https://cdn.test/2-b.jpg?token=t"
    assert recorder.body() == {"expiresIn": 300}
