"""AWS Textract adapter implementing the OcrEngine interface."""

from __future__ import annotations

import boto3

from .constants import TEXTRACT_LINE_BLOCK


class TextractOcr:
    """Runs synchronous document text detection on in-memory images.

    Credentials and region come from the standard AWS configuration chain
    unless a client is passed in.
    """

    def __init__(self, client=None, region_name: str | None = None) -> None:
        self.client = client or boto3.client("textract", region_name=region_name)

    def detect_text(self, image_bytes: bytes) -> str:
        resp = self.client.detect_document_text(Document={"Bytes": image_bytes})
        lines = [
            block["Text"]
            for block in resp.get("Blocks", [])
            if block.get("BlockType") == TEXTRACT_LINE_BLOCK and block.get("Text")
        ]
        return " ".join(lines)
