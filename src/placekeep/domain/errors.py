"""Domain error taxonomy shared by services and adapters."""

from __future__ import annotations


class PlaceKeepError(RuntimeError):
    """Base class for recoverable placekeep failures."""


class RecordValidationError(PlaceKeepError):
    """Raised when a record lacks the fields required to form a place."""


class UnknownPlaceError(PlaceKeepError):
    """Raised when an action targets a place that is not in the store."""

    def __init__(self, external_id: str) -> None:
        super().__init__(f"Unknown place: {external_id}")
        self.external_id = external_id


class TransientNetworkError(PlaceKeepError):
    """The backend could not be reached (offline, timeout, connection reset)."""


class ConflictOrServerError(PlaceKeepError):
    """The backend answered with a client or server error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AttachmentStorageError(PlaceKeepError):
    """Storing or removing an attachment failed."""


class OptimisticMutationInProgressError(PlaceKeepError):
    """A store already has an unresolved optimistic mutation."""


class UnsyncedReviewError(PlaceKeepError):
    """The review only exists locally and cannot be changed on the server yet."""
