"""Data models for USPS Mail Filter."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class CandidateMessage:
    """A full Gmail message returned by the search."""

    message_id: str
    subject: str
    payload: dict[str, Any] = field(default_factory=dict)  # Gmail MessagePart tree


@dataclass(frozen=True)
class ImagePart:
    """An image attachment found while walking a message's part tree."""

    index: int  # structural order within the message
    attachment_id: str
    mime_type: str
    filename: str = ""


class MatchKind(str, Enum):
    SKIP = "skip"
    FOUND = "found"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class MatchOutcome:
    """Result of matching the OCR text of one image."""

    kind: MatchKind
    name: str | None = None

    @classmethod
    def skip(cls) -> MatchOutcome:
        return cls(MatchKind.SKIP)

    @classmethod
    def found(cls, name: str) -> MatchOutcome:
        return cls(MatchKind.FOUND, name)

    @classmethod
    def no_match(cls) -> MatchOutcome:
        return cls(MatchKind.NO_MATCH)


@dataclass
class MessageOutcome:
    """Aggregated match result for a whole message."""

    found_name: str | None = None
    images_total: int = 0
    images_scanned: int = 0
    ocr_errors: int = 0

    @property
    def found(self) -> bool:
        return self.found_name is not None


class Disposition(str, Enum):
    KEEP = "keep"  # add label, remove from inbox
    DISCARD = "discard"  # move to trash


class Stage(str, Enum):
    FETCH = "fetch"
    RESOLVE = "resolve"
    APPLY = "apply"


@dataclass
class MessageResult:
    """What happened to a single candidate message."""

    message_id: str
    subject: str = ""
    disposition: Disposition | None = None
    found_name: str | None = None
    failed_stage: Stage | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.failed_stage is not None


@dataclass
class RunSummary:
    """Result of one batch run."""

    query: str = ""
    processed: int = 0
    kept: int = 0
    discarded: int = 0
    failed: int = 0
    results: list[MessageResult] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    dry_run: bool = False
