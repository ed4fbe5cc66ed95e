"""Offline mutation payloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime  # noqa: TC003

from .enums import MutationKind
from .place import Place  # noqa: TC001


@dataclass(frozen=True, slots=True, kw_only=True)
class Attachment:
    """A photo kept as raw bytes until it has been uploaded."""

    name: str
    data: bytes
    content_type: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ReviewDraft:
    visited_on: date
    rating: int | None = None
    text: str | None = None
    attachments: tuple[Attachment, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class PendingMutation:
    """A queued action carrying everything needed to replay it after a restart."""

    temp_id: str
    created_at: datetime
    place: Place
    draft: ReviewDraft
    kind: MutationKind = MutationKind.CREATE_REVIEW


@dataclass(frozen=True, slots=True, kw_only=True)
class CreatedRecord:
    """Backend acknowledgement of a created review."""

    record_id: str
    place_internal_id: int | None = None
