"""Persisting and restoring the place table between sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.config.sync import PLACE_SNAPSHOT_KEY

if TYPE_CHECKING:
    from collections.abc import Callable

    from placekeep.domain.ports.unit_of_work import LocalStateUnitOfWork
    from placekeep.domain.stores import PlaceStore

log = getLogger(__name__)


def restore_places(
    store: PlaceStore,
    unit_of_work_factory: Callable[[], LocalStateUnitOfWork],
    *,
    key: str = PLACE_SNAPSHOT_KEY,
) -> int:
    """Load the last saved place table into ``store``; returns the number of places."""

    with unit_of_work_factory() as uow:
        places = uow.repositories.snapshots.load(key)
    if places is None:
        log.info("No saved places found under %r", key)
        return 0
    count = store.load(places)
    log.info("Restored %s places from local storage", count)
    return count


def save_places(
    store: PlaceStore,
    unit_of_work_factory: Callable[[], LocalStateUnitOfWork],
    *,
    key: str = PLACE_SNAPSHOT_KEY,
) -> None:
    with unit_of_work_factory() as uow:
        uow.repositories.snapshots.save(key, store.all())
        uow.commit()


def autosave_places(
    store: PlaceStore,
    unit_of_work_factory: Callable[[], LocalStateUnitOfWork],
    *,
    key: str = PLACE_SNAPSHOT_KEY,
) -> Callable[[], None]:
    """Persist the place table after every change; returns the unsubscribe hook."""

    def persist(_table: object) -> None:
        save_places(store, unit_of_work_factory, key=key)

    return store.subscribe(persist)
