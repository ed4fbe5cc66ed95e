"""Attachment storage boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class AttachmentStorage(Protocol):
    async def store(self, path: str, data: bytes, *, content_type: str | None = None) -> None: ...

    async def remove(self, paths: Sequence[str]) -> None: ...

    async def create_temporary_access_url(self, path: str, ttl_seconds: int) -> str: ...


def attachment_path(owner_id: str, group_uuid: str, timestamp_ms: int, original_name: str) -> str:
    """Storage path ``{owner}/{group}/{timestamp}-{name}``."""

    safe_name = original_name.replace("/", "_").strip() or "attachment"
    return f"{owner_id}/{group_uuid}/{timestamp_ms}-{safe_name}"
