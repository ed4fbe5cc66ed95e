"""Remote backend configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

DEFAULT_ATTACHMENT_BUCKET = "review-photos"
BACKEND_TIMEOUT_SECONDS = 15.0
PLACE_DETAILS_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True, slots=True, kw_only=True)
class BackendConfig:
    """Holds the backend endpoint, credentials and HTTP client settings."""

    api_url: str
    api_key: str
    owner_id: str
    attachment_bucket: str = DEFAULT_ATTACHMENT_BUCKET
    rpc: ResilienceConfig
    details: ResilienceConfig


def _cache_place_details(payload: object) -> bool:
    return isinstance(payload, dict) and bool(payload.get("place_id"))  # pyright: ignore[reportUnknownMemberType]


def _auth_headers(api_key: str) -> dict[str, str]:
    return {"apikey": api_key, "Authorization": f"Bearer {api_key}"}


def get_backend_config() -> BackendConfig:
    values = require_env_vars(("PLACEKEEP_API_URL", "PLACEKEEP_API_KEY", "PLACEKEEP_OWNER_ID"))
    api_url = values["PLACEKEEP_API_URL"].rstrip("/")
    headers = _auth_headers(values["PLACEKEEP_API_KEY"])
    return BackendConfig(
        api_url=api_url,
        api_key=values["PLACEKEEP_API_KEY"],
        owner_id=values["PLACEKEEP_OWNER_ID"],
        attachment_bucket=os.getenv("PLACEKEEP_ATTACHMENT_BUCKET") or DEFAULT_ATTACHMENT_BUCKET,
        # user state must never be served from a cache
        rpc=ResilienceConfig(
            name="backend",
            base_url=api_url,
            timeout_seconds=BACKEND_TIMEOUT_SECONDS,
            cache=None,
            default_headers=headers,
        ),
        details=ResilienceConfig(
            name="place-details",
            base_url=api_url,
            timeout_seconds=BACKEND_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=CacheConfig(
                backend="sqlite",
                default_ttl_seconds=PLACE_DETAILS_TTL_SECONDS,
                should_cache=_cache_place_details,
            ),
            default_headers=headers,
        ),
    )
