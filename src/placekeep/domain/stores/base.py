"""Observable state containers with a single rollback slot."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)

type Listener[TState] = Callable[[TState], None]


class StateContainer[TState]:
    """Holds an immutable state value and notifies subscribers on every change.

    State values are never mutated in place; every write installs a new value.
    That makes a snapshot a plain reference and a restore an exact copy of the
    earlier state.
    """

    def __init__(self, initial: TState) -> None:
        self._state = initial
        self._snapshot: TState | None = None
        self._has_snapshot = False
        self._listeners: list[Listener[TState]] = []

    @property
    def state(self) -> TState:
        return self._state

    def subscribe(self, listener: Listener[TState]) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Rollback slot ----------------------------------------------------------

    @property
    def has_snapshot(self) -> bool:
        return self._has_snapshot

    def take_snapshot(self) -> bool:
        """Remember the current state; refuse while another snapshot is held."""

        if self._has_snapshot:
            return False
        self._snapshot = self._state
        self._has_snapshot = True
        return True

    def restore_snapshot(self) -> None:
        if not self._has_snapshot:
            return
        snapshot = self._snapshot
        self.release_snapshot()
        self._commit(snapshot)  # type: ignore[arg-type]

    def release_snapshot(self) -> None:
        self._snapshot = None
        self._has_snapshot = False

    # Writes -----------------------------------------------------------------

    def _commit(self, state: TState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in tuple(self._listeners):
            listener(state)

    def _rewrite(self, transform: Callable[[TState], TState]) -> None:
        """Apply ``transform`` to the live state and to any held snapshot."""

        if self._has_snapshot:
            self._snapshot = transform(self._snapshot)  # type: ignore[arg-type]
        self._commit(transform(self._state))
