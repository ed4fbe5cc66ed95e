"""Ports for external collaborators."""

from __future__ import annotations

from .attachments import AttachmentStorage, attachment_path
from .backend import ItineraryPatch, RecordBackend, SummaryScope
from .persistence import PendingMutationRepository, PlaceSnapshotRepository
from .unit_of_work import (
    LocalStateRepositories,
    LocalStateUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AttachmentStorage",
    "ItineraryPatch",
    "LocalStateRepositories",
    "LocalStateUnitOfWork",
    "PendingMutationRepository",
    "PlaceSnapshotRepository",
    "RecordBackend",
    "RepositoryCollection",
    "SummaryScope",
    "UnitOfWork",
    "attachment_path",
]
