"""Snapshot / confirm / revert protocol spanning one or more state containers."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from placekeep.domain.errors import OptimisticMutationInProgressError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from placekeep.domain.stores import StateContainer

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoreBinding[TFinal]:
    """A store touched by a mutation and how to swap in the confirmed value.

    ``replace`` receives the temporary key and the server-confirmed value. Stores
    that only need rollback protection pass ``None``.
    """

    store: StateContainer[Any]
    replace: Callable[[str, TFinal], object] | None = None


class OptimisticCoordinator[TFinal]:
    """Applies tentative writes and resolves them exactly once.

    Every bound store holds at most one rollback snapshot. ``begin`` refuses to
    start while any bound store already holds one, whichever coordinator took
    it, and leaves the existing snapshot untouched.
    """

    def __init__(self, bindings: Sequence[StoreBinding[TFinal]]) -> None:
        if not bindings:
            raise ValueError("An optimistic coordinator needs at least one store")
        self._bindings = tuple(bindings)
        self._active = False
        self._temp_id: str | None = None

    @property
    def pending(self) -> bool:
        return self._active

    @property
    def temp_id(self) -> str | None:
        return self._temp_id

    def can_begin(self) -> bool:
        return not self._active and not any(b.store.has_snapshot for b in self._bindings)

    def begin(self, mutate: Callable[[], object], *, temp_id: str | None = None) -> bool:
        """Snapshot every bound store, then apply ``mutate``.

        Returns ``False`` without calling ``mutate`` when a mutation is already
        outstanding on any bound store.
        """

        if not self.can_begin():
            log.warning("Optimistic mutation %s rejected: another one is outstanding", temp_id)
            return False
        for binding in self._bindings:
            binding.store.take_snapshot()
        self._active = True
        self._temp_id = temp_id
        try:
            mutate()
        except Exception:
            self.revert()
            raise
        return True

    def confirm(self, final: TFinal | None = None) -> None:
        """Replace the tentative value with ``final`` and drop the snapshots."""

        if not self._active:
            return
        if final is not None and self._temp_id is not None:
            self.confirm_tentative(self._temp_id, final)
        self._finish()

    def revert(self) -> None:
        """Restore every bound store to its pre-mutation state."""

        if not self._active:
            return
        for binding in self._bindings:
            binding.store.restore_snapshot()
        self._finish()

    def keep_tentative(self) -> None:
        """Resolve without a server answer, leaving the tentative state in place.

        Used when the mutation was queued for a later sync.
        """

        if not self._active:
            return
        self._finish()

    def confirm_tentative(self, temp_id: str, final: TFinal) -> bool:
        """Swap a previously kept tentative value for its confirmed version."""

        replaced = False
        for binding in self._bindings:
            if binding.replace is None:
                continue
            if binding.replace(temp_id, final) is not False:
                replaced = True
        return replaced

    async def run[TResult](
        self,
        mutate: Callable[[], object],
        call: Callable[[], Awaitable[TResult]],
        *,
        temp_id: str | None = None,
        finalize: Callable[[TResult], TFinal | None] | None = None,
        cleanup: Callable[[], Awaitable[object]] | None = None,
    ) -> TResult:
        """Apply ``mutate``, await ``call``, then confirm or revert.

        On failure ``cleanup`` runs first (best effort), then the stores are
        reverted and the error is re-raised.
        """

        if not self.begin(mutate, temp_id=temp_id):
            raise OptimisticMutationInProgressError(
                "Another change is still being saved; try again once it completes"
            )
        try:
            result = await call()
        except Exception:
            if cleanup is not None:
                await _best_effort(cleanup)
            self.revert()
            raise
        self.confirm(finalize(result) if finalize is not None else None)
        return result

    def _finish(self) -> None:
        for binding in self._bindings:
            binding.store.release_snapshot()
        self._active = False
        self._temp_id = None


async def _best_effort(cleanup: Callable[[], Awaitable[object]]) -> None:
    try:
        await cleanup()
    except Exception:
        log.exception("Cleanup after failed mutation did not complete")
