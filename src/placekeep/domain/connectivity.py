"""Online / offline indicator with transition listeners."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)


class ConnectivitySignal:
    def __init__(self, *, online: bool = True) -> None:
        self._online = online
        self._listeners: list[Callable[[bool], None]] = []

    @property
    def online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:  # noqa: FBT001
        """Update the state; listeners only hear about actual transitions."""

        if online == self._online:
            return
        self._online = online
        log.info("Connectivity changed: %s", "online" if online else "offline")
        for listener in tuple(self._listeners):
            listener(online)

    def subscribe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
