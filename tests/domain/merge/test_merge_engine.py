from __future__ import annotations

import math
from dataclasses import replace
from typing import TYPE_CHECKING

from placekeep.domain.merge import PersistedRecord, merge
from placekeep.domain.model import Coordinates, GroupContext, RelationshipFlag
from tests.helpers.places import (
    make_detailed,
    make_place,
    make_provider,
    make_review,
    make_summary,
)

if TYPE_CHECKING:
    from placekeep.domain.model import Place


def _visited_place_with_review() -> Place:
    return make_place(internal_id=7, visited=True, reviews=(make_review("11"),))


def test_merge_is_idempotent_per_source() -> None:
    existing = _visited_place_with_review()
    source = make_summary(
        address="1 Vineyard Rd",
        flags={RelationshipFlag.FAVORITE: True},
    )

    once = merge(source, existing)
    assert once is not None

    assert merge(once, existing) == once
    assert merge(source, once) == once


def test_summary_declaring_not_visited_clears_flag_and_reviews() -> None:
    existing = _visited_place_with_review()

    merged = merge(make_summary(flags={RelationshipFlag.VISITED: False}), existing)

    assert merged is not None
    assert merged.visited is False
    assert merged.reviews == ()


def test_provider_result_without_visit_flag_preserves_reviews() -> None:
    existing = _visited_place_with_review()

    merged = merge(make_provider(phone="+1 607 555 0100"), existing)

    assert merged is not None
    assert merged.visited is True
    assert len(merged.reviews) == 1
    assert merged.phone == "+1 607 555 0100"


def test_nan_coordinates_without_fallback_are_rejected() -> None:
    source = make_provider(coordinates=Coordinates(latitude=math.nan, longitude=-76.88))

    assert merge(source) is None


def test_invalid_coordinates_fall_back_to_existing() -> None:
    existing = make_place()
    source = make_summary(coordinates=Coordinates(latitude=math.nan, longitude=math.nan))

    merged = merge(source, existing)

    assert merged is not None
    assert merged.coordinates == existing.coordinates


def test_missing_name_without_fallback_is_rejected() -> None:
    assert merge(make_provider(name="   ")) is None
    assert merge(make_provider(name=None)) is None


def test_absent_fields_never_replace_populated_ones() -> None:
    existing = make_place(
        internal_id=7,
        address="1 Vineyard Rd",
        website="https://hillside.example",
        rating=4.6,
        opening_hours=("Mon: 10-5",),
    )

    merged = merge(make_summary(address="", website=None), existing)

    assert merged is not None
    assert merged.internal_id == 7
    assert merged.address == "1 Vineyard Rd"
    assert merged.website == "https://hillside.example"
    assert merged.rating == 4.6
    assert merged.opening_hours == ("Mon: 10-5",)


def test_flags_absent_from_source_are_inherited() -> None:
    existing = make_place(on_wishlist=True, favorite=True)

    merged = merge(make_summary(flags={RelationshipFlag.VISITED: True}), existing)

    assert merged is not None
    assert merged.visited is True
    assert merged.on_wishlist is True
    assert merged.favorite is True


def test_declared_false_flag_clears_previous_true() -> None:
    existing = make_place(favorite=True)

    merged = merge(make_summary(flags={RelationshipFlag.FAVORITE: False}), existing)

    assert merged is not None
    assert merged.favorite is False


def test_detailed_record_replaces_reviews_when_it_has_some() -> None:
    existing = _visited_place_with_review()
    fresh = (make_review("21"), make_review("22"))

    merged = merge(
        make_detailed(reviews=fresh, flags={RelationshipFlag.VISITED: True}), existing
    )

    assert merged is not None
    assert [review.id for review in merged.reviews] == ["21", "22"]


def test_detailed_record_with_empty_reviews_and_no_flag_preserves_reviews() -> None:
    existing = _visited_place_with_review()

    merged = merge(make_detailed(reviews=()), existing)

    assert merged is not None
    assert merged.visited is True
    assert len(merged.reviews) == 1


def test_persisted_record_keeps_relationship_state() -> None:
    existing = _visited_place_with_review()
    source = PersistedRecord(
        external_id="place-1",
        internal_id=7,
        name="Hillside Cellars (renamed)",
        coordinates=existing.coordinates,
    )

    merged = merge(source, existing)

    assert merged is not None
    assert merged.name == "Hillside Cellars (renamed)"
    assert merged.visited is True
    assert merged.reviews == existing.reviews


def test_group_context_first_writer_wins() -> None:
    first = GroupContext(group_id=1, name="Seneca loop")
    existing = make_place(group=first)

    merged = merge(make_detailed(group=GroupContext(group_id=2, name="Keuka loop")), existing)

    assert merged is not None
    assert merged.group == first


def test_group_context_explicit_clear() -> None:
    existing = make_place(group=GroupContext(group_id=1))

    merged = merge(make_detailed(clears_group=True), existing)

    assert merged is not None
    assert merged.group is None


def test_group_context_set_when_absent() -> None:
    group = GroupContext(group_id=3, name="Cayuga day")

    merged = merge(make_detailed(group=group), make_place())

    assert merged is not None
    assert merged.group == group


def test_place_source_keeps_known_internal_id() -> None:
    existing = make_place(internal_id=42)
    incoming = replace(existing, internal_id=None, name="Hillside Estate")

    merged = merge(incoming, existing)

    assert merged is not None
    assert merged.internal_id == 42
    assert merged.name == "Hillside Estate"
