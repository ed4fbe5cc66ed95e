"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecordKind(StrEnum):
    """Structural shape an inbound place record was classified as."""

    PROVIDER = "provider"
    SUMMARY = "summary"
    DETAILED = "detailed"
    PERSISTED = "persisted"


class RelationshipFlag(StrEnum):
    VISITED = "visited"
    ON_WISHLIST = "on_wishlist"
    FAVORITE = "favorite"


class MutationKind(StrEnum):
    CREATE_REVIEW = "create_review"
