"""Where the local state database and the HTTP response cache live on disk.

The local state database holds the queued review mutations and the last saved
place table. Both files share one per-user data directory, overridable with
``PLACEKEEP_DATA_DIR``; ``DATABASE_URI`` replaces the local state database
outright (tests point it at a temp file or ``:memory:``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "placekeep"
LOCAL_STATE_FILENAME: Final[str] = "placekeep.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def _prepared_dir(self) -> Path:
        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def local_state_path(self) -> Path:
        return self._prepared_dir() / LOCAL_STATE_FILENAME

    def http_cache_path(self) -> Path:
        return self._prepared_dir() / HTTP_CACHE_FILENAME


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    base = os.getenv("XDG_DATA_HOME")
    base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return base_path / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("PLACEKEEP_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    path = (storage or get_storage_config()).local_state_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")
