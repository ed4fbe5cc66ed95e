"""Domain model for places, reviews, itineraries and queued mutations."""

from __future__ import annotations

from .enums import MutationKind, RecordKind, RelationshipFlag
from .itinerary import Itinerary, ItineraryStop, ResolvedStop
from .mutation import Attachment, CreatedRecord, PendingMutation, ReviewDraft
from .place import GroupContext, Place, Review, ReviewPatch, is_temporary_id
from .primitives import Coordinates, ExternalId, GeoBounds, GroupId, InternalId, format_distance

__all__ = [
    "Attachment",
    "Coordinates",
    "CreatedRecord",
    "ExternalId",
    "GeoBounds",
    "GroupContext",
    "GroupId",
    "InternalId",
    "Itinerary",
    "ItineraryStop",
    "MutationKind",
    "PendingMutation",
    "Place",
    "RecordKind",
    "RelationshipFlag",
    "ResolvedStop",
    "Review",
    "ReviewDraft",
    "ReviewPatch",
    "format_distance",
    "is_temporary_id",
]
