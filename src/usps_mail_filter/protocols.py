"""Capability interfaces for the mail and OCR collaborators."""

from __future__ import annotations

from typing import Protocol

from .models import CandidateMessage


class Mailbox(Protocol):
    """Operations the pipeline needs from the mail provider."""

    def search(self, query: str) -> list[str]:
        """Return the ids of all messages matching ``query``."""
        ...

    def get_full(self, message_id: str) -> CandidateMessage: ...

    def get_attachment(self, message_id: str, attachment_id: str) -> bytes: ...

    def ensure_label(self, name: str) -> str:
        """Return the id of the label called ``name``, creating it if needed."""
        ...

    def apply_label(
        self,
        message_id: str,
        add_label_ids: list[str],
        remove_label_ids: list[str],
    ) -> None: ...

    def trash(self, message_id: str) -> None: ...


class OcrEngine(Protocol):
    def detect_text(self, image_bytes: bytes) -> str:
        """Return all recognized lines of ``image_bytes`` joined by spaces."""
        ...
