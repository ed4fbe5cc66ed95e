"""Durable, FIFO log of mutations waiting to be replayed."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.errors import PlaceKeepError

if TYPE_CHECKING:
    from collections.abc import Callable

    from placekeep.domain.model import PendingMutation
    from placekeep.domain.ports.unit_of_work import LocalStateUnitOfWork

log = getLogger(__name__)


class DurableMutationLog:
    """Pending mutations stored through a unit of work so they survive restarts."""

    def __init__(self, unit_of_work_factory: Callable[[], LocalStateUnitOfWork]) -> None:
        self._unit_of_work_factory = unit_of_work_factory

    def enqueue(self, mutation: PendingMutation) -> None:
        with self._unit_of_work_factory() as uow:
            repository = uow.repositories.mutations
            if repository.contains(mutation.temp_id):
                raise PlaceKeepError(f"Mutation {mutation.temp_id} is already queued")
            repository.add(mutation)
            uow.commit()
        log.info(
            "Queued %s for %s as %s (%s attachments)",
            mutation.kind,
            mutation.place.external_id,
            mutation.temp_id,
            len(mutation.draft.attachments),
        )

    def drain(self) -> list[PendingMutation]:
        """Return every queued mutation in enqueue order without removing any."""

        with self._unit_of_work_factory() as uow:
            return uow.repositories.mutations.list_pending()

    def contains(self, temp_id: str) -> bool:
        with self._unit_of_work_factory() as uow:
            return uow.repositories.mutations.contains(temp_id)

    def remove(self, temp_id: str) -> bool:
        with self._unit_of_work_factory() as uow:
            removed = uow.repositories.mutations.remove(temp_id)
            uow.commit()
        if removed:
            log.debug("Removed queued mutation %s", temp_id)
        return removed

    def clear(self) -> int:
        with self._unit_of_work_factory() as uow:
            cleared = uow.repositories.mutations.clear()
            uow.commit()
        log.info("Cleared %s queued mutations", cleared)
        return cleared

    def __len__(self) -> int:
        return len(self.drain())
