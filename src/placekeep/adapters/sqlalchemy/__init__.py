"""SQLAlchemy adapter package for PlaceKeep's local state."""

from __future__ import annotations

from .mappings import metadata
from .repositories import SqlAlchemyPendingMutationRepository, SqlAlchemyPlaceSnapshotRepository
from .unit_of_work import (
    SqlAlchemyLocalStateUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyLocalStateUnitOfWork",
    "SqlAlchemyPendingMutationRepository",
    "SqlAlchemyPlaceSnapshotRepository",
    "StartupError",
    "configured_engine",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
