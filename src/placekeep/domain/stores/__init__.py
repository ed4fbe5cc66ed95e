"""Observable in-memory caches."""

from __future__ import annotations

from .base import StateContainer
from .itineraries import ItineraryStore
from .places import PlaceStore

__all__ = ["ItineraryStore", "PlaceStore", "StateContainer"]
