"""Offline queue and sync defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_int

TEMP_ID_PREFIX = "temp-"
DEFAULT_SIGNED_URL_TTL_SECONDS = 300
PLACE_SNAPSHOT_KEY = "places"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    signed_url_ttl_seconds: int = DEFAULT_SIGNED_URL_TTL_SECONDS
    place_snapshot_key: str = PLACE_SNAPSHOT_KEY


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        signed_url_ttl_seconds=optional_env_int(
            "PLACEKEEP_SIGNED_URL_TTL", DEFAULT_SIGNED_URL_TTL_SECONDS
        ),
    )
