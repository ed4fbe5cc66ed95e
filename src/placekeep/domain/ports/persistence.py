"""Ports for the local durable state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from placekeep.domain.model import PendingMutation, Place


@runtime_checkable
class PendingMutationRepository(Protocol):
    """Durable FIFO of queued mutations."""

    def add(self, mutation: PendingMutation) -> None: ...

    def list_pending(self) -> list[PendingMutation]: ...

    def contains(self, temp_id: str) -> bool: ...

    def remove(self, temp_id: str) -> bool: ...

    def clear(self) -> int: ...


@runtime_checkable
class PlaceSnapshotRepository(Protocol):
    """Key/value storage for serialised place tables."""

    def save(self, key: str, places: Iterable[Place]) -> None: ...

    def load(self, key: str) -> list[Place] | None: ...
