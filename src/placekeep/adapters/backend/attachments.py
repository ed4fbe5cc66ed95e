"""Object-storage adapter for review photos."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from placekeep.adapters.http_resilience import ResilienceConfig, ResilientClient
from placekeep.config.backend import BackendConfig, get_backend_config
from placekeep.domain.errors import AttachmentStorageError, ConflictOrServerError
from placekeep.domain.ports.attachments import AttachmentStorage

from .schema import SignedUrlPayload
from .transport import json_body, parse, send

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpAttachmentStorage:
    """Stores blobs under ``storage/v1/object/{bucket}/{path}``.

    Connection failures surface as ``TransientNetworkError`` so callers can
    queue; rejected uploads surface as ``AttachmentStorageError``.
    """

    config: BackendConfig = field(default_factory=get_backend_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def store(self, path: str, data: bytes, *, content_type: str | None = None) -> None:
        headers = {"x-upsert": "false"}
        if content_type:
            headers["Content-Type"] = content_type
        async with self.client_factory(self.config.rpc) as client:
            try:
                await send(
                    client,
                    "POST",
                    f"storage/v1/object/{self.config.attachment_bucket}/{path}",
                    action=f"upload {path}",
                    content=data,
                    headers=headers,
                )
            except ConflictOrServerError as exc:
                raise AttachmentStorageError(str(exc)) from exc
        log.debug("Stored attachment %s (%s bytes)", path, len(data))

    async def remove(self, paths: Sequence[str]) -> None:
        if not paths:
            return
        async with self.client_factory(self.config.rpc) as client:
            try:
                await send(
                    client,
                    "DELETE",
                    f"storage/v1/object/{self.config.attachment_bucket}",
                    action=f"remove {len(paths)} attachments",
                    json={"prefixes": list(paths)},
                )
            except ConflictOrServerError as exc:
                raise AttachmentStorageError(str(exc)) from exc

    async def create_temporary_access_url(self, path: str, ttl_seconds: int) -> str:
        action = f"sign {path}"
        async with self.client_factory(self.config.rpc) as client:
            response = await send(
                client,
                "POST",
                f"storage/v1/object/sign/{self.config.attachment_bucket}/{path}",
                action=action,
                json={"expiresIn": ttl_seconds},
            )
            signed = parse(SignedUrlPayload, json_body(response, action=action), action=action)
        if signed.signed_url.startswith(("http://", "https://")):
            return signed.signed_url
        return f"{self.config.api_url}/storage/v1/{signed.signed_url.lstrip('/')}"


if TYPE_CHECKING:
    _storage_check: AttachmentStorage = HttpAttachmentStorage()
