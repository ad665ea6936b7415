"""Shared fixtures and fake collaborators for tests."""

from __future__ import annotations

import threading
import time

import pytest

from usps_mail_filter.config import FilterConfig, NameSet
from usps_mail_filter.models import CandidateMessage


def image_part(attachment_id: str, mime_type: str = "image/jpeg") -> dict:
    return {
        "mimeType": mime_type,
        "filename": f"{attachment_id}.jpg",
        "body": {"attachmentId": attachment_id, "size": 1024},
    }


def make_message(message_id: str, attachment_ids: list[str], subject: str = "Your Daily Digest") -> CandidateMessage:
    """Build an Informed Delivery-style message: an HTML body followed by mail-piece images."""
    return CandidateMessage(
        message_id=message_id,
        subject=subject,
        payload={
            "mimeType": "multipart/related",
            "headers": [{"name": "Subject", "value": subject}],
            "body": {"size": 0},
            "parts": [
                {"mimeType": "text/html", "body": {"data": "PGh0bWw+PC9odG1sPg==", "size": 13}},
                *[image_part(att_id) for att_id in attachment_ids],
            ],
        },
    )


class FakeMailbox:
    """In-memory Mailbox that records every mutation."""

    def __init__(
        self,
        messages: list[CandidateMessage] | None = None,
        attachments: dict[str, bytes] | None = None,
    ) -> None:
        self.messages = {m.message_id: m for m in messages or []}
        self.attachments = attachments or {}
        self.label_ids: dict[str, str] = {}
        self.message_labels: dict[str, set[str]] = {mid: {"INBOX"} for mid in self.messages}
        self.queries: list[str] = []
        self.attachment_calls: list[tuple[str, str]] = []
        self.labeled: list[tuple[str, list[str], list[str]]] = []
        self.trashed: list[str] = []
        self.fail_fetch: set[str] = set()
        self.fail_attachment: set[str] = set()
        self.fail_apply: set[str] = set()
        self._lock = threading.Lock()

    def search(self, query: str) -> list[str]:
        self.queries.append(query)
        excluded = {
            self.label_ids.get(token[len("-label:"):])
            for token in query.split()
            if token.startswith("-label:")
        }
        return [
            mid
            for mid in self.messages
            if mid not in self.trashed and not (self.message_labels[mid] & excluded)
        ]

    def get_full(self, message_id: str) -> CandidateMessage:
        if message_id in self.fail_fetch:
            raise RuntimeError(f"fetch failed for {message_id}")
        return self.messages[message_id]

    def get_attachment(self, message_id: str, attachment_id: str) -> bytes:
        with self._lock:
            self.attachment_calls.append((message_id, attachment_id))
        if attachment_id in self.fail_attachment:
            raise RuntimeError(f"attachment {attachment_id} unavailable")
        return self.attachments[attachment_id]

    def ensure_label(self, name: str) -> str:
        return self.label_ids.setdefault(name, f"Label_{len(self.label_ids) + 1}")

    def apply_label(self, message_id: str, add_label_ids: list[str], remove_label_ids: list[str]) -> None:
        if message_id in self.fail_apply:
            raise RuntimeError(f"modify failed for {message_id}")
        with self._lock:
            self.labeled.append((message_id, add_label_ids, remove_label_ids))
            labels = self.message_labels[message_id]
            labels.update(add_label_ids)
            labels.difference_update(remove_label_ids)

    def trash(self, message_id: str) -> None:
        if message_id in self.fail_apply:
            raise RuntimeError(f"trash failed for {message_id}")
        with self._lock:
            self.trashed.append(message_id)


class FakeOcr:
    """OcrEngine returning canned text per image; exceptions are raised."""

    def __init__(self, texts: dict[bytes, str | Exception], delays: dict[bytes, float] | None = None) -> None:
        self.texts = texts
        self.delays = delays or {}
        self.calls: list[bytes] = []
        self._lock = threading.Lock()

    def detect_text(self, image_bytes: bytes) -> str:
        with self._lock:
            self.calls.append(image_bytes)
        if image_bytes in self.delays:
            time.sleep(self.delays[image_bytes])
        result = self.texts[image_bytes]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def names() -> NameSet:
    return NameSet.from_lists(["Newman", "Paul"], ["Resident"])


@pytest.fixture
def config(names: NameSet) -> FilterConfig:
    return FilterConfig(names=names, sender_address="usps@example.com", label_name="USPS")


@pytest.fixture
def digest_mailbox() -> FakeMailbox:
    """Three messages: one for Paul, one with no names, one addressed to 'Resident'."""
    return FakeMailbox(
        messages=[
            make_message("m1", ["a1", "a2"], subject="Mail for Paul"),
            make_message("m2", ["b1"], subject="Catalogs"),
            make_message("m3", ["c1"], subject="Current resident"),
        ],
        attachments={
            "a1": b"img-a1",
            "a2": b"img-a2",
            "b1": b"img-b1",
            "c1": b"img-c1",
        },
    )


@pytest.fixture
def digest_ocr() -> FakeOcr:
    return FakeOcr(
        {
            b"img-a1": "ACME BANK PO BOX 1",
            b"img-a2": "PAUL NEWMAN 12 ELM ST",
            b"img-b1": "FURNITURE SALE",
            b"img-c1": "PAUL OR CURRENT RESIDENT",
        }
    )
