"""Mapping httpx outcomes onto the domain error taxonomy."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Unpack

import httpx
from pydantic import BaseModel, ValidationError

from placekeep.domain.errors import ConflictOrServerError, TransientNetworkError

if TYPE_CHECKING:
    from placekeep.adapters.http_resilience import RequestOptions, ResilientClient

log = getLogger(__name__)

_SNIPPET_LENGTH = 200


async def send(
    client: ResilientClient,
    method: str,
    url: str,
    *,
    action: str,
    **kwargs: Unpack[RequestOptions],
) -> httpx.Response:
    """Send a request; transport failures are transient, HTTP errors are not."""

    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as exc:
        raise TransientNetworkError(f"{action}: {exc.__class__.__name__}: {exc}") from exc
    except httpx.RequestError as exc:
        raise ConflictOrServerError(f"{action}: {exc.__class__.__name__}: {exc}") from exc
    if response.is_error:
        log.warning("%s failed with HTTP %s", action, response.status_code)
        raise ConflictOrServerError(
            f"{action} failed with HTTP {response.status_code}: "
            f"{response.text[:_SNIPPET_LENGTH]}",
            status_code=response.status_code,
        )
    return response


def json_body(response: httpx.Response, *, action: str) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise ConflictOrServerError(
            f"{action} returned malformed JSON", status_code=response.status_code
        ) from exc


def parse[TModel: BaseModel](model: type[TModel], payload: object, *, action: str) -> TModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ConflictOrServerError(f"{action} returned an unexpected payload: {exc}") from exc
