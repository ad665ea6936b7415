"""Gmail API adapter implementing the Mailbox interface."""

from __future__ import annotations

import base64
import threading

from googleapiclient.errors import HttpError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .constants import NO_SUBJECT, PAGE_SIZE, USER_ID
from .models import CandidateMessage


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in (429, 500, 503)


@retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)
def _execute(request, lock: threading.Lock) -> dict:
    # Only the HTTP call holds the lock; backoff sleeps do not.
    with lock:
        return request.execute()


def _get_subject(payload: dict) -> str:
    for header in payload.get("headers", []):
        if header.get("name", "").lower() == "subject":
            return header.get("value", "")
    return NO_SUBJECT


def decode_attachment_data(data: str) -> bytes:
    """Decode Gmail's base64url attachment data, tolerating stripped padding."""
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


class GmailMailbox:
    """Mailbox backed by an authenticated Gmail API service.

    The googleapiclient transport is not thread-safe, so requests are
    serialized with a lock.
    """

    def __init__(self, service, user_id: str = USER_ID) -> None:
        self.service = service
        self.user_id = user_id
        self._lock = threading.Lock()

    def _call(self, request) -> dict:
        return _execute(request, self._lock) or {}

    def search(self, query: str) -> list[str]:
        """List all message IDs matching the query, handling pagination."""
        ids: list[str] = []
        page_token: str | None = None

        while True:
            kwargs: dict = {"userId": self.user_id, "q": query, "maxResults": PAGE_SIZE}
            if page_token:
                kwargs["pageToken"] = page_token

            resp = self._call(self.service.users().messages().list(**kwargs))
            ids.extend(msg["id"] for msg in resp.get("messages", []))

            page_token = resp.get("nextPageToken")
            if not page_token:
                break

        return ids

    def get_full(self, message_id: str) -> CandidateMessage:
        resp = self._call(
            self.service.users().messages().get(userId=self.user_id, id=message_id, format="full")
        )
        payload = resp.get("payload") or {}
        return CandidateMessage(
            message_id=resp.get("id", message_id),
            subject=_get_subject(payload),
            payload=payload,
        )

    def get_attachment(self, message_id: str, attachment_id: str) -> bytes:
        resp = self._call(
            self.service.users()
            .messages()
            .attachments()
            .get(userId=self.user_id, messageId=message_id, id=attachment_id)
        )
        return decode_attachment_data(resp.get("data", ""))

    def ensure_label(self, name: str) -> str:
        """Return the ID of the label called ``name``, creating it when missing."""
        resp = self._call(self.service.users().labels().list(userId=self.user_id))
        for label in resp.get("labels", []):
            if label.get("name") == name:
                return label["id"]

        created = self._call(
            self.service.users().labels().create(
                userId=self.user_id,
                body={
                    "name": name,
                    "labelListVisibility": "labelShow",
                    "messageListVisibility": "show",
                },
            )
        )
        return created["id"]

    def apply_label(
        self,
        message_id: str,
        add_label_ids: list[str],
        remove_label_ids: list[str],
    ) -> None:
        self._call(
            self.service.users().messages().modify(
                userId=self.user_id,
                id=message_id,
                body={"addLabelIds": add_label_ids, "removeLabelIds": remove_label_ids},
            )
        )

    def trash(self, message_id: str) -> None:
        self._call(self.service.users().messages().trash(userId=self.user_id, id=message_id))
