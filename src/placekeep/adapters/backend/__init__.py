"""Public interface for the record backend adapter."""

from __future__ import annotations

from .attachments import HttpAttachmentStorage
from .client import HttpRecordBackend, place_to_wire
from .translator import classify_record, classify_records, detect_kind

__all__ = [
    "HttpAttachmentStorage",
    "HttpRecordBackend",
    "classify_record",
    "classify_records",
    "detect_kind",
    "place_to_wire",
]
