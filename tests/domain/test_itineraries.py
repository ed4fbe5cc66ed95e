from __future__ import annotations

import asyncio
from datetime import date

import pytest

from placekeep.domain.connectivity import ConnectivitySignal
from placekeep.domain.errors import ConflictOrServerError, TransientNetworkError
from placekeep.domain.itineraries import ItineraryService
from placekeep.domain.merge import PersistedRecord
from placekeep.domain.model import GroupContext, Itinerary, ItineraryStop
from placekeep.domain.stores import ItineraryStore, PlaceStore
from tests.helpers.fakes import FakeBackend
from tests.helpers.places import VINEYARD, make_place

TRIP_DATE = date(2024, 8, 3)


def _itinerary() -> Itinerary:
    return Itinerary(
        group_id=9,
        name="Seneca loop",
        on_date=TRIP_DATE,
        stops=(
            ItineraryStop(external_id="a", notes="Tasting at 11"),
            ItineraryStop(external_id="b"),
            ItineraryStop(external_id="c", notes="Lunch"),
        ),
    )


def _service(*, online: bool = True) -> tuple[ItineraryService, FakeBackend]:
    places = PlaceStore()
    context = GroupContext(group_id=9, name="Seneca loop", on_date=TRIP_DATE)
    places.load(
        [
            make_place("a", group=context),
            make_place("b", group=context),
            make_place("c", group=context),
        ]
    )
    backend = FakeBackend(itineraries={9: _itinerary()})
    service = ItineraryService(
        itineraries=ItineraryStore(),
        places=places,
        backend=backend,
        connectivity=ConnectivitySignal(online=online),
    )
    return service, backend


def test_load_fetches_itineraries_for_date() -> None:
    service, backend = _service()

    loaded = asyncio.run(service.load(TRIP_DATE))

    assert [itinerary.group_id for itinerary in loaded] == [9]
    assert service.itineraries.require(9) == _itinerary()
    assert backend.calls_to("fetch_itineraries") == [TRIP_DATE]


def test_reorder_confirms_server_version() -> None:
    service, _ = _service()
    asyncio.run(service.load(TRIP_DATE))

    updated = asyncio.run(service.reorder(9, ["c", "b", "a"]))

    assert updated.stop_ids == ("c", "b", "a")
    assert service.itineraries.require(9).stop_ids == ("c", "b", "a")
    assert not service.itineraries.has_snapshot


def test_failed_edit_restores_order_membership_and_notes_verbatim() -> None:
    service, backend = _service()
    asyncio.run(service.load(TRIP_DATE))
    before_itineraries = service.itineraries.state
    before_places = service.places.state
    backend.fail("update_itinerary", ConflictOrServerError("nope", status_code=500), times=3)

    for edit in (
        service.reorder(9, ["c", "a"]),
        service.remove_stop(9, "b"),
        service.set_note(9, "a", "Moved to 2pm"),
    ):
        with pytest.raises(ConflictOrServerError):
            asyncio.run(edit)

    assert service.itineraries.state is before_itineraries
    assert service.places.state is before_places


def test_remove_stop_clears_matching_group_context() -> None:
    service, _ = _service()
    asyncio.run(service.load(TRIP_DATE))

    updated = asyncio.run(service.remove_stop(9, "b"))

    assert updated.stop_ids == ("a", "c")
    assert service.places.require("b").group is None
    assert service.places.require("a").group is not None


def test_set_note_round_trip() -> None:
    service, backend = _service()
    asyncio.run(service.load(TRIP_DATE))

    asyncio.run(service.set_note(9, "b", "Buy a case"))

    assert service.itineraries.require(9).stops[1].notes == "Buy a case"
    assert backend.itineraries[9].stops[1].notes == "Buy a case"


def test_resolve_prefers_itinerary_notes_and_order() -> None:
    service, _ = _service()
    asyncio.run(service.load(TRIP_DATE))
    asyncio.run(service.reorder(9, ["c", "a", "b"]))

    resolved = service.resolve(9)

    assert [stop.place.external_id for stop in resolved] == ["c", "a", "b"]
    assert [stop.notes for stop in resolved] == ["Lunch", "Tasting at 11", None]


def test_edits_need_a_connection() -> None:
    service, backend = _service(online=False)
    service.itineraries.put(_itinerary())

    with pytest.raises(TransientNetworkError):
        asyncio.run(service.reorder(9, ["c"]))

    assert backend.calls == []


def test_load_merges_places_embedded_in_stops() -> None:
    service, backend = _service()
    backend.itineraries[9] = Itinerary(
        group_id=9,
        name="Seneca loop",
        on_date=TRIP_DATE,
        stops=(
            ItineraryStop(external_id="a"),
            ItineraryStop(
                external_id="zz",
                notes="Lunch",
                source=PersistedRecord(
                    external_id="zz", internal_id=314, name="Far Hill Estate", coordinates=VINEYARD
                ),
            ),
        ),
    )

    asyncio.run(service.load(TRIP_DATE))

    assert service.places.require("zz").internal_id == 314
    resolved = service.resolve(9)
    assert [stop.place.external_id for stop in resolved] == ["a", "zz"]
    assert resolved[1].notes == "Lunch"


def test_create_adds_itinerary_with_backend_id() -> None:
    service, backend = _service()

    created = asyncio.run(service.create(TRIP_DATE, "Keuka day"))

    assert created.group_id == 41
    assert service.itineraries.require(41).name == "Keuka day"
    assert backend.calls_to("create_itinerary") == [("Keuka day", TRIP_DATE)]


def test_delete_drops_itinerary_and_group_context() -> None:
    service, _ = _service()
    asyncio.run(service.load(TRIP_DATE))

    asyncio.run(service.delete(9))

    assert service.itineraries.get(9) is None
    assert all(place.group is None for place in service.places.all())
    assert not service.places.has_snapshot


def test_delete_refused_by_backend_reverts() -> None:
    service, backend = _service()
    asyncio.run(service.load(TRIP_DATE))
    before_itineraries = service.itineraries.state
    before_places = service.places.state
    backend.delete_result = False

    with pytest.raises(ConflictOrServerError):
        asyncio.run(service.delete(9))

    assert service.itineraries.state is before_itineraries
    assert service.places.state is before_places


def test_add_stop_sets_group_context_only_when_unset() -> None:
    service, _ = _service()
    asyncio.run(service.load(TRIP_DATE))
    service.places.load([*service.places.all(), make_place("d", name="Delta Vines")])
    other = asyncio.run(service.create(TRIP_DATE, "Second day"))

    asyncio.run(service.add_stop(other.group_id, "d"))
    asyncio.run(service.add_stop(other.group_id, "a"))

    assert service.itineraries.require(other.group_id).stop_ids == ("d", "a")
    assert service.places.require("d").group == GroupContext(
        group_id=other.group_id, name="Second day", on_date=TRIP_DATE
    )
    group_a = service.places.require("a").group
    assert group_a is not None
    assert group_a.group_id == 9


def test_add_stop_failure_reverts_both_stores() -> None:
    service, backend = _service()
    asyncio.run(service.load(TRIP_DATE))
    service.places.load([*service.places.all(), make_place("d")])
    before_itineraries = service.itineraries.state
    before_places = service.places.state
    backend.fail("update_itinerary", ConflictOrServerError("nope", status_code=500))

    with pytest.raises(ConflictOrServerError):
        asyncio.run(service.add_stop(9, "d"))

    assert service.itineraries.state is before_itineraries
    assert service.places.state is before_places
