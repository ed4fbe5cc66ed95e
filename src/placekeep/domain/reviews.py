"""Creating, editing and deleting reviews with optimistic local state."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.config.sync import DEFAULT_SIGNED_URL_TTL_SECONDS, TEMP_ID_PREFIX
from placekeep.domain.attachments import discard_attachments, upload_attachments
from placekeep.domain.errors import (
    ConflictOrServerError,
    OptimisticMutationInProgressError,
    PlaceKeepError,
    TransientNetworkError,
    UnsyncedReviewError,
)
from placekeep.domain.model import PendingMutation, Review
from placekeep.domain.optimistic import OptimisticCoordinator, StoreBinding

if TYPE_CHECKING:
    from collections.abc import Callable

    from placekeep.domain.connectivity import ConnectivitySignal
    from placekeep.domain.model import Place, ReviewDraft, ReviewPatch
    from placekeep.domain.mutation_log import DurableMutationLog
    from placekeep.domain.ports.attachments import AttachmentStorage
    from placekeep.domain.ports.backend import RecordBackend
    from placekeep.domain.stores import PlaceStore

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid.uuid4()}"


@dataclass(slots=True)
class ReviewService:
    """Review mutations for the current user.

    Creating a review works offline: the tentative review stays in the place
    store and the draft, attachments included, is queued for the sync engine.
    Edits and deletes need a connection and are reverted when the backend
    rejects them.
    """

    places: PlaceStore
    backend: RecordBackend
    attachments: AttachmentStorage
    mutation_log: DurableMutationLog
    connectivity: ConnectivitySignal
    owner_id: str
    signed_url_ttl_seconds: int = DEFAULT_SIGNED_URL_TTL_SECONDS
    now: Callable[[], datetime] = _utcnow
    temp_ids: Callable[[], str] = new_temp_id
    coordinator: OptimisticCoordinator[Review] = field(init=False)

    def __post_init__(self) -> None:
        self.coordinator = OptimisticCoordinator(
            [StoreBinding(self.places, self.places.replace_review)]
        )

    async def save_review(self, external_id: str, draft: ReviewDraft) -> Review:
        """Record a visit; returns the confirmed review, or the tentative one if queued."""

        place = self.places.require(external_id)
        temp_id = self.temp_ids()
        tentative = Review(
            id=temp_id, visited_on=draft.visited_on, rating=draft.rating, text=draft.text
        )
        if not self.coordinator.begin(
            lambda: self.places.add_review(external_id, tentative), temp_id=temp_id
        ):
            raise OptimisticMutationInProgressError(
                f"Cannot save a review for {external_id} while another change is pending"
            )

        if not self.connectivity.online:
            return self._queue(place, draft, tentative)

        paths: list[str] = []
        try:
            paths = await upload_attachments(
                self.attachments,
                owner_id=self.owner_id,
                attachments=draft.attachments,
                now=self.now,
            )
            created = await self.backend.create_record(place, draft, paths)
        except TransientNetworkError as exc:
            log.info("Backend unreachable while saving review for %s: %s", external_id, exc)
            await discard_attachments(self.attachments, paths)
            return self._queue(place, draft, tentative)
        except Exception:
            await discard_attachments(self.attachments, paths)
            self.coordinator.revert()
            raise

        confirmed = replace(tentative, id=created.record_id, photos=tuple(paths))
        self.coordinator.confirm(confirmed)
        if created.place_internal_id is not None:
            self.places.set_internal_id(external_id, created.place_internal_id)
        log.info("Saved review %s for %s", confirmed.id, external_id)
        return confirmed

    async def update_review(self, review_id: str, patch: ReviewPatch) -> Review:
        self._require_synced(review_id)
        if not self.connectivity.online:
            raise TransientNetworkError("Reviews can only be edited while online")
        return await self.coordinator.run(
            lambda: self.places.update_review(review_id, patch),
            lambda: self.backend.update_record(review_id, patch),
            temp_id=review_id,
            finalize=lambda updated: updated,
        )

    async def delete_review(self, review_id: str) -> None:
        """Delete a review; a still-queued review is dropped from the log instead."""

        found = self.places.find_review(review_id)
        if found is None:
            raise PlaceKeepError(f"Unknown review: {review_id}")
        _, review = found

        if review.is_tentative:
            self._drop_queued(review_id)
            return

        if not self.connectivity.online:
            raise TransientNetworkError("Reviews can only be deleted while online")

        async def delete() -> None:
            if not await self.backend.delete_record(review_id):
                raise ConflictOrServerError(f"Backend refused to delete review {review_id}")

        await self.coordinator.run(lambda: self.places.remove_review(review_id), delete)
        await discard_attachments(self.attachments, review.photos)

    async def photo_urls(self, review: Review) -> list[str]:
        """Short-lived URLs for displaying the review's photos."""

        return [
            await self.attachments.create_temporary_access_url(path, self.signed_url_ttl_seconds)
            for path in review.photos
        ]

    def _queue(self, place: Place, draft: ReviewDraft, tentative: Review) -> Review:
        mutation = PendingMutation(
            temp_id=tentative.id, created_at=self.now(), place=place, draft=draft
        )
        try:
            self.mutation_log.enqueue(mutation)
        except Exception:
            self.coordinator.revert()
            raise
        self.coordinator.keep_tentative()
        return tentative

    def _drop_queued(self, review_id: str) -> None:
        if not self.coordinator.begin(lambda: self.places.remove_review(review_id)):
            raise OptimisticMutationInProgressError(
                f"Cannot delete review {review_id} while another change is pending"
            )
        try:
            self.mutation_log.remove(review_id)
        except Exception:
            self.coordinator.revert()
            raise
        self.coordinator.confirm()
        log.info("Dropped queued review %s", review_id)

    def _require_synced(self, review_id: str) -> None:
        found = self.places.find_review(review_id)
        if found is None:
            raise PlaceKeepError(f"Unknown review: {review_id}")
        if found[1].is_tentative:
            raise UnsyncedReviewError(f"Review {review_id} has not been synced yet")
