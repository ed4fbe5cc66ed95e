from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

import pytest

from placekeep.domain.attachments import discard_attachments, upload_attachments
from placekeep.domain.errors import AttachmentStorageError
from placekeep.domain.ports.attachments import attachment_path
from tests.helpers.fakes import FakeAttachmentStorage
from tests.helpers.places import make_draft

FIXED_NOW = datetime(2024, 7, 14, 18, 30, tzinfo=UTC)


def test_attachment_path_layout() -> None:
    path = attachment_path("owner", "group", 1720981800000, "sunset/terrace.jpg")

    assert path == "owner/group/1720981800000-sunset_terrace.jpg"


def test_upload_stores_every_attachment_under_one_group() -> None:
    storage = FakeAttachmentStorage()

    paths = asyncio.run(
        upload_attachments(
            storage,
            owner_id="owner",
            attachments=make_draft(photos=2).attachments,
            now=lambda: FIXED_NOW,
        )
    )

    assert len(paths) == 2
    assert set(paths) == set(storage.stored)
    groups = {path.split("/")[1] for path in paths}
    assert len(groups) == 1
    assert paths[0].endswith(f"/{int(FIXED_NOW.timestamp() * 1000)}-photo-0.jpg")


def test_upload_without_attachments_touches_nothing() -> None:
    storage = FakeAttachmentStorage()

    assert asyncio.run(upload_attachments(storage, owner_id="owner", attachments=())) == []
    assert storage.stored == {}


def test_partial_upload_failure_removes_stored_files() -> None:
    storage = FakeAttachmentStorage(fail_store_after=2)

    with pytest.raises(AttachmentStorageError):
        asyncio.run(
            upload_attachments(
                storage, owner_id="owner", attachments=make_draft(photos=3).attachments
            )
        )

    assert storage.stored == {}
    assert len(storage.removed) == 2


def test_discard_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    storage = FakeAttachmentStorage(fail_remove=True)
    caplog.set_level(logging.WARNING, logger="placekeep.domain.attachments")

    asyncio.run(discard_attachments(storage, ["owner/g/1-a.jpg"]))

    assert "orphaned attachments" in caplog.text
