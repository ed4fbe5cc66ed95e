from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from placekeep.config import (
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    get_backend_config,
    get_database_config,
    get_storage_config,
    get_sync_config,
    optional_env_int,
    require_env_vars,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_require_env_vars_returns_stripped_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)
    assert exc.value.names == ("MISSING_A", "MISSING_B")


def test_optional_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)
    assert optional_env_int("EXAMPLE_INT", 7) == 7

    monkeypatch.setenv("EXAMPLE_INT", "42")
    assert optional_env_int("EXAMPLE_INT", 7) == 42

    monkeypatch.setenv("EXAMPLE_INT", "many")
    with pytest.raises(ConfigurationError):
        optional_env_int("EXAMPLE_INT", 7)

    monkeypatch.setenv("EXAMPLE_INT", "0")
    with pytest.raises(ConfigurationError):
        optional_env_int("EXAMPLE_INT", 7)


def test_backend_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLACEKEEP_API_URL", "https://backend.test/")
    monkeypatch.setenv("PLACEKEEP_API_KEY", "secret")
    monkeypatch.setenv("PLACEKEEP_OWNER_ID", "owner")
    monkeypatch.delenv("PLACEKEEP_ATTACHMENT_BUCKET", raising=False)

    config = get_backend_config()

    assert config.api_url == "https://backend.test"
    assert config.attachment_bucket == "review-photos"
    assert config.rpc.cache is None
    assert config.details.cache is not None
    assert config.rpc.default_headers is not None
    assert config.rpc.default_headers["Authorization"] == "Bearer secret"


def test_backend_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLACEKEEP_API_URL", "https://backend.test")
    monkeypatch.delenv("PLACEKEEP_API_KEY", raising=False)
    monkeypatch.delenv("PLACEKEEP_OWNER_ID", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_backend_config()


def test_sync_config_ttl_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLACEKEEP_SIGNED_URL_TTL", "60")

    assert get_sync_config().signed_url_ttl_seconds == 60


def test_storage_paths_follow_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PLACEKEEP_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    storage = get_storage_config()

    assert storage.local_state_path() == (tmp_path / "data" / "placekeep.db").resolve()
    assert storage.http_cache_path().parent.is_dir()
    assert get_database_config().uri.endswith("placekeep.db")


def test_database_uri_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_configure_logging_quiets_http_libraries() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(force=True)
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging(verbose=True, force=True)
        assert logging.getLogger("httpx").level == logging.NOTSET
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
