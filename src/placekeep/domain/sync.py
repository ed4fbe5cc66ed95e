"""Replaying queued mutations once the connection is back."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.attachments import discard_attachments, upload_attachments
from placekeep.domain.errors import PlaceKeepError
from placekeep.domain.model import Review
from placekeep.domain.optimistic import OptimisticCoordinator, StoreBinding

if TYPE_CHECKING:
    from collections.abc import Callable

    from placekeep.domain.connectivity import ConnectivitySignal
    from placekeep.domain.model import CreatedRecord, PendingMutation
    from placekeep.domain.mutation_log import DurableMutationLog
    from placekeep.domain.ports.attachments import AttachmentStorage
    from placekeep.domain.ports.backend import RecordBackend
    from placekeep.domain.stores import PlaceStore

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class SyncResult:
    """Outcome of one pass over the mutation log."""

    attempted: int = 0
    synced: int = 0
    failed: int = 0
    skipped: int = 0


class SyncEngine:
    """Drains the mutation log in enqueue order.

    A failed entry stays queued and the drain moves on to the next one. Entries
    already being replayed by an overlapping call are skipped, and every entry
    is re-checked against the log right before its replay starts.
    """

    def __init__(
        self,
        *,
        places: PlaceStore,
        backend: RecordBackend,
        attachments: AttachmentStorage,
        mutation_log: DurableMutationLog,
        connectivity: ConnectivitySignal,
        owner_id: str,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._places = places
        self._backend = backend
        self._attachments = attachments
        self._log = mutation_log
        self._connectivity = connectivity
        self._owner_id = owner_id
        self._now = now
        self._coordinator: OptimisticCoordinator[Review] = OptimisticCoordinator(
            [StoreBinding(places, places.replace_review)]
        )
        self._in_flight: set[str] = set()
        self._tasks: set[asyncio.Task[SyncResult]] = set()

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    async def sync_pending(self) -> SyncResult:
        result = SyncResult()
        if not self._connectivity.online:
            log.info("Offline; leaving queued mutations for later")
            return result

        for mutation in self._log.drain():
            temp_id = mutation.temp_id
            if temp_id in self._in_flight or not self._log.contains(temp_id):
                result.skipped += 1
                continue
            self._in_flight.add(temp_id)
            result.attempted += 1
            try:
                await self._replay(mutation)
            except PlaceKeepError as exc:
                result.failed += 1
                log.warning("Replay of %s failed; it stays queued: %s", temp_id, exc)
            except Exception:
                result.failed += 1
                log.exception("Unexpected error replaying %s; it stays queued", temp_id)
            else:
                result.synced += 1
            finally:
                self._in_flight.discard(temp_id)

        log.info(
            "Sync finished: attempted=%s, synced=%s, failed=%s, skipped=%s",
            result.attempted,
            result.synced,
            result.failed,
            result.skipped,
        )
        return result

    def bind(self) -> Callable[[], None]:
        """Start a sync on every transition to online; returns the unsubscribe hook."""

        def on_change(online: bool) -> None:  # noqa: FBT001
            if not online:
                return
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                log.warning("Back online outside an event loop; call sync_pending() directly")
                return
            task = loop.create_task(self.sync_pending())
            self._tasks.add(task)
            task.add_done_callback(self._forget)

        return self._connectivity.subscribe(on_change)

    async def wait_idle(self) -> None:
        """Wait for syncs started by connectivity transitions to finish."""

        while self._tasks:
            await asyncio.gather(*tuple(self._tasks), return_exceptions=True)

    def _forget(self, task: asyncio.Task[SyncResult]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Background sync failed", exc_info=exc)

    async def _replay(self, mutation: PendingMutation) -> None:
        paths = await upload_attachments(
            self._attachments,
            owner_id=self._owner_id,
            attachments=mutation.draft.attachments,
            now=self._now,
        )
        try:
            created = await self._backend.create_record(mutation.place, mutation.draft, paths)
        except Exception:
            await discard_attachments(self._attachments, paths)
            raise

        confirmed = Review(
            id=created.record_id,
            visited_on=mutation.draft.visited_on,
            rating=mutation.draft.rating,
            text=mutation.draft.text,
            photos=tuple(paths),
        )
        if not self._log.contains(mutation.temp_id):
            log.warning(
                "Queued review %s was deleted locally during replay; server copy is %s",
                mutation.temp_id,
                created.record_id,
            )
            return
        self._apply_confirmed(mutation, confirmed, created)
        self._log.remove(mutation.temp_id)
        log.info("Synced %s as review %s", mutation.temp_id, created.record_id)

    def _apply_confirmed(
        self, mutation: PendingMutation, confirmed: Review, created: CreatedRecord
    ) -> None:
        external_id = mutation.place.external_id
        if not self._coordinator.confirm_tentative(mutation.temp_id, confirmed):
            # tentative copy lost, e.g. restarted without a saved place table
            self._places.adopt_review(mutation.place, confirmed)
        if created.place_internal_id is not None:
            self._places.set_internal_id(external_id, created.place_internal_id)
