"""Upload and best-effort cleanup of review attachments."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.domain.ports.attachments import attachment_path

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from placekeep.domain.model import Attachment
    from placekeep.domain.ports.attachments import AttachmentStorage

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def upload_attachments(
    storage: AttachmentStorage,
    *,
    owner_id: str,
    attachments: Sequence[Attachment],
    now: Callable[[], datetime] = _utcnow,
) -> list[str]:
    """Store every attachment under one fresh group folder and return the paths.

    If any upload fails, the ones already stored are removed before the error
    propagates.
    """

    if not attachments:
        return []
    group_uuid = str(uuid.uuid4())
    stored: list[str] = []
    try:
        for attachment in attachments:
            timestamp_ms = int(now().timestamp() * 1000)
            path = attachment_path(owner_id, group_uuid, timestamp_ms, attachment.name)
            await storage.store(path, attachment.data, content_type=attachment.content_type)
            stored.append(path)
    except Exception:
        await discard_attachments(storage, stored)
        raise
    return stored


async def discard_attachments(storage: AttachmentStorage, paths: Sequence[str]) -> None:
    """Remove uploaded attachments, logging rather than raising on failure."""

    if not paths:
        return
    try:
        await storage.remove(list(paths))
    except Exception:
        log.warning(
            "Could not remove %s orphaned attachments: %s", len(paths), list(paths), exc_info=True
        )
