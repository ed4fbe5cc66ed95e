"""JSON codecs for domain objects stored as text columns."""

from __future__ import annotations

from pydantic import TypeAdapter

from placekeep.domain.model import Place

PLACE_ADAPTER: TypeAdapter[Place] = TypeAdapter(Place)
PLACE_LIST_ADAPTER: TypeAdapter[list[Place]] = TypeAdapter(list[Place])


def dump_place(place: Place) -> str:
    return PLACE_ADAPTER.dump_json(place).decode("utf-8")


def load_place(payload: str) -> Place:
    return PLACE_ADAPTER.validate_json(payload)


def dump_places(places: list[Place]) -> str:
    return PLACE_LIST_ADAPTER.dump_json(places).decode("utf-8")


def load_places(payload: str) -> list[Place]:
    return PLACE_LIST_ADAPTER.validate_json(payload)
