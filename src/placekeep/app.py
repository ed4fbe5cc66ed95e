"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.adapters.backend import HttpAttachmentStorage, HttpRecordBackend
from placekeep.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyLocalStateUnitOfWork,
    is_started,
    startup,
)
from placekeep.config import get_backend_config, get_sync_config
from placekeep.domain.connectivity import ConnectivitySignal
from placekeep.domain.itineraries import ItineraryService
from placekeep.domain.library import LibraryService
from placekeep.domain.local_state import autosave_places, restore_places
from placekeep.domain.mutation_log import DurableMutationLog
from placekeep.domain.ports.unit_of_work import LocalStateUnitOfWork
from placekeep.domain.reviews import ReviewService
from placekeep.domain.stores import ItineraryStore, PlaceStore
from placekeep.domain.sync import SyncEngine, SyncResult

if TYPE_CHECKING:
    from placekeep.config import BackendConfig, SyncConfig
    from placekeep.domain.model import Coordinates, GeoBounds, PendingMutation, Place
    from placekeep.domain.ports.attachments import AttachmentStorage
    from placekeep.domain.ports.backend import RecordBackend

UnitOfWorkFactory = Callable[[], LocalStateUnitOfWork]

log = getLogger(__name__)


@dataclass(slots=True)
class PlaceKeepRuntime:
    """Every store and service of one client session, wired together."""

    places: PlaceStore
    itineraries: ItineraryStore
    connectivity: ConnectivitySignal
    mutation_log: DurableMutationLog
    reviews: ReviewService
    library: LibraryService
    itinerary_service: ItineraryService
    sync: SyncEngine
    _unsubscribers: list[Callable[[], None]] = field(default_factory=list)

    def close(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyLocalStateUnitOfWork


def build_runtime(
    *,
    backend: RecordBackend | None = None,
    attachments: AttachmentStorage | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    backend_config: BackendConfig | None = None,
    sync_config: SyncConfig | None = None,
    online: bool = True,
) -> PlaceKeepRuntime:
    """Restore local state and wire the services; no network call happens here."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    config = backend_config or get_backend_config()
    settings = sync_config or get_sync_config()

    places = PlaceStore()
    restore_places(places, effective_uow, key=settings.place_snapshot_key)

    effective_backend = backend or HttpRecordBackend(config=config)
    effective_attachments = attachments or HttpAttachmentStorage(config=config)
    connectivity = ConnectivitySignal(online=online)
    mutation_log = DurableMutationLog(effective_uow)
    itineraries = ItineraryStore()

    sync = SyncEngine(
        places=places,
        backend=effective_backend,
        attachments=effective_attachments,
        mutation_log=mutation_log,
        connectivity=connectivity,
        owner_id=config.owner_id,
    )
    runtime = PlaceKeepRuntime(
        places=places,
        itineraries=itineraries,
        connectivity=connectivity,
        mutation_log=mutation_log,
        reviews=ReviewService(
            places=places,
            backend=effective_backend,
            attachments=effective_attachments,
            mutation_log=mutation_log,
            connectivity=connectivity,
            owner_id=config.owner_id,
            signed_url_ttl_seconds=settings.signed_url_ttl_seconds,
        ),
        library=LibraryService(places=places, backend=effective_backend, connectivity=connectivity),
        itinerary_service=ItineraryService(
            itineraries=itineraries,
            places=places,
            backend=effective_backend,
            connectivity=connectivity,
        ),
        sync=sync,
    )
    runtime._unsubscribers.append(  # noqa: SLF001
        autosave_places(places, effective_uow, key=settings.place_snapshot_key)
    )
    runtime._unsubscribers.append(sync.bind())  # noqa: SLF001
    log.info(
        "Runtime ready: places=%s, queued=%s, online=%s",
        len(places),
        len(mutation_log),
        connectivity.online,
    )
    return runtime


def list_pending_mutations(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> list[PendingMutation]:
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    return DurableMutationLog(effective_uow).drain()


def clear_pending_mutations(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> int:
    """Drop every queued mutation without replaying it."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    return DurableMutationLog(effective_uow).clear()


def sync_pending_mutations(*, runtime: PlaceKeepRuntime | None = None) -> SyncResult:
    """Replay the mutation log against the backend."""

    effective_runtime = runtime or build_runtime()
    try:
        log.info("Starting sync of %s queued mutations", len(effective_runtime.mutation_log))
        return asyncio.run(effective_runtime.sync.sync_pending())
    finally:
        if runtime is None:
            effective_runtime.close()


def refresh_places(
    bounds: GeoBounds | None = None,
    *,
    limit: int | None = None,
    runtime: PlaceKeepRuntime | None = None,
) -> int:
    """Pull relationship summaries for ``bounds`` into the local place table."""

    effective_runtime = runtime or build_runtime()
    try:
        count = asyncio.run(effective_runtime.library.refresh(bounds, limit=limit))
    finally:
        if runtime is None:
            effective_runtime.close()
    log.info("Refreshed %s places (cached: %s)", count, len(effective_runtime.places))
    return count


def search_places(
    bounds: GeoBounds,
    *,
    origin: Coordinates | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> list[Place]:
    """Search the saved place table without touching the network."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    settings = sync_config or get_sync_config()
    places = PlaceStore()
    restore_places(places, effective_uow, key=settings.place_snapshot_key)
    return places.within(bounds, origin=origin or bounds.center)
