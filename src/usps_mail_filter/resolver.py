"""Image extraction and OCR for a single message."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import closing
from typing import Any, Iterator

from .config import NameSet
from .matcher import match
from .models import CandidateMessage, ImagePart, MatchKind, MatchOutcome, MessageOutcome
from .protocols import Mailbox, OcrEngine

logger = logging.getLogger(__name__)


class ImageResolutionError(RuntimeError):
    """Raised when a message has images but none of them could be read."""


def extract_image_parts(payload: dict[str, Any]) -> list[ImagePart]:
    """Collect image attachments from a Gmail part tree.

    Parts are visited depth-first, each part before its children and siblings
    in structural order. Only parts that reference an attachment payload are
    collected; images embedded inline as ``body.data`` are ignored.
    """
    images: list[ImagePart] = []
    stack = [payload] if payload else []

    while stack:
        part = stack.pop()
        mime_type = part.get("mimeType", "") or ""
        attachment_id = (part.get("body") or {}).get("attachmentId")
        if mime_type.startswith("image/") and attachment_id:
            images.append(
                ImagePart(
                    index=len(images),
                    attachment_id=attachment_id,
                    mime_type=mime_type,
                    filename=part.get("filename", "") or "",
                )
            )
        # Reversed so the first child is popped next.
        stack.extend(reversed(part.get("parts") or []))

    return images


class ImageTextResolver:
    """Reads the images of a message until one of them mentions a target name."""

    def __init__(self, mailbox: Mailbox, ocr: OcrEngine, max_workers: int = 1) -> None:
        self.mailbox = mailbox
        self.ocr = ocr
        self.max_workers = max(1, max_workers)

    def fetch_image(self, message_id: str, part: ImagePart) -> bytes:
        return self.mailbox.get_attachment(message_id, part.attachment_id)

    def resolve_images(self, message: CandidateMessage) -> list[bytes]:
        """Download every image attachment of ``message`` in structural order.

        Eager counterpart of ``resolve``, which fetches each image only when
        it is about to be read so the short-circuit also saves downloads.
        """
        return [
            self.fetch_image(message.message_id, part)
            for part in extract_image_parts(message.payload)
        ]

    def _read_text(self, message_id: str, part: ImagePart) -> str:
        return self.ocr.detect_text(self.fetch_image(message_id, part))

    def _texts_in_order(
        self, message_id: str, parts: list[ImagePart]
    ) -> Iterator[tuple[ImagePart, str | None, Exception | None]]:
        if self.max_workers == 1 or len(parts) < 2:
            for part in parts:
                try:
                    yield part, self._read_text(message_id, part), None
                except Exception as exc:  # noqa: BLE001
                    yield part, None, exc
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures: list[Future[str]] = [
                pool.submit(self._read_text, message_id, part) for part in parts
            ]
            try:
                # Consumed in structural order, not completion order.
                for part, future in zip(parts, futures):
                    try:
                        yield part, future.result(), None
                    except Exception as exc:  # noqa: BLE001
                        yield part, None, exc
            finally:
                for future in futures:
                    future.cancel()

    def resolve(self, message: CandidateMessage, names: NameSet) -> MessageOutcome:
        """Scan the images of ``message`` and report the first target name found.

        A failure on one image is logged and the image counts as no match.
        Raises ImageResolutionError when every image failed.
        """
        parts = extract_image_parts(message.payload)
        outcome = MessageOutcome(images_total=len(parts))

        with closing(self._texts_in_order(message.message_id, parts)) as texts:
            for part, text, error in texts:
                image_no = part.index + 1
                if error is not None:
                    outcome.ocr_errors += 1
                    logger.warning("Error detecting text in image %d: %s", image_no, error)
                    continue

                outcome.images_scanned += 1
                result: MatchOutcome = match(text or "", names.targets, names.denies)
                if result.kind is MatchKind.SKIP:
                    logger.info("Image %d contains deny term; skipping", image_no)
                elif result.kind is MatchKind.FOUND:
                    logger.info("Found '%s' in image %d!", result.name, image_no)
                    outcome.found_name = result.name
                    break

        if parts and outcome.ocr_errors == len(parts):
            raise ImageResolutionError(
                f"Could not read any of the {len(parts)} images in message {message.message_id}"
            )
        return outcome
