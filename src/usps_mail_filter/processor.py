"""Batch orchestration - search, read, decide, and apply per message."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, timedelta

from .config import FilterConfig
from .constants import INBOX_LABEL, LOOKBACK_DAYS, QUERY_DATE_FORMAT
from .models import Disposition, MessageResult, RunSummary, Stage
from .policy import decide
from .protocols import Mailbox, OcrEngine
from .resolver import ImageTextResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchCriteria:
    """Which messages a run looks at."""

    sender_address: str
    label_name: str
    after: date

    @classmethod
    def from_config(cls, config: FilterConfig, today: date | None = None) -> SearchCriteria:
        today = today or date.today()
        return cls(
            sender_address=config.sender_address,
            label_name=config.label_name,
            after=today - timedelta(days=LOOKBACK_DAYS),
        )

    def to_query(self) -> str:
        # Excluding the label keeps re-runs from picking up handled messages.
        return (
            f"from:{self.sender_address} "
            f"after:{self.after.strftime(QUERY_DATE_FORMAT)} "
            f"-label:{self.label_name}"
        )


class BatchProcessor:
    """Runs the keep-or-trash decision over every candidate message.

    A failure while fetching, reading, or updating one message is logged and
    recorded in the summary; the rest of the batch still runs. Errors while
    preparing the label or searching propagate to the caller.
    """

    def __init__(
        self,
        mailbox: Mailbox,
        ocr: OcrEngine,
        config: FilterConfig,
        dry_run: bool = False,
    ) -> None:
        self.mailbox = mailbox
        self.config = config
        self.dry_run = dry_run
        self.resolver = ImageTextResolver(mailbox, ocr, max_workers=config.ocr_workers)
        self._lock = threading.Lock()

    def run(self, criteria: SearchCriteria | None = None) -> RunSummary:
        criteria = criteria or SearchCriteria.from_config(self.config)
        label_id = self.mailbox.ensure_label(criteria.label_name)

        query = criteria.to_query()
        summary = RunSummary(query=query, dry_run=self.dry_run)
        logger.info("Searching for emails with query: %s", query)
        message_ids = self.mailbox.search(query)
        logger.info("Found %d messages", len(message_ids))

        if self.config.message_workers > 1 and len(message_ids) > 1:
            with ThreadPoolExecutor(max_workers=self.config.message_workers) as pool:
                results = list(
                    pool.map(lambda mid: self.process_message(mid, label_id, summary), message_ids)
                )
        else:
            results = [self.process_message(mid, label_id, summary) for mid in message_ids]

        summary.results = results
        logger.info("Complete")
        return summary

    def process_message(self, message_id: str, label_id: str, summary: RunSummary) -> MessageResult:
        """Fetch, resolve, decide, and apply a single message."""
        result = MessageResult(message_id=message_id)
        stage = Stage.FETCH
        try:
            message = self.mailbox.get_full(message_id)
            result.subject = message.subject
            logger.info("Processing: %s", message.subject)

            stage = Stage.RESOLVE
            outcome = self.resolver.resolve(message, self.config.names)
            result.found_name = outcome.found_name
            result.disposition = decide(outcome)

            stage = Stage.APPLY
            self._apply(message_id, label_id, result)
        except Exception as exc:  # noqa: BLE001
            result.failed_stage = stage
            result.error = str(exc)
            logger.exception("Error processing message %s at %s stage", message_id, stage.value)

        self._record(summary, result)
        return result

    def _apply(self, message_id: str, label_id: str, result: MessageResult) -> None:
        prefix = "[DRY RUN] " if self.dry_run else ""
        if result.disposition is Disposition.KEEP:
            logger.info(
                "%sAdding %s label and removing from inbox (found name: %s)",
                prefix,
                self.config.label_name,
                result.found_name,
            )
            if not self.dry_run:
                self.mailbox.apply_label(message_id, [label_id], [INBOX_LABEL])
        else:
            logger.info("%sTrashing email (no target names found)", prefix)
            if not self.dry_run:
                self.mailbox.trash(message_id)

    def _record(self, summary: RunSummary, result: MessageResult) -> None:
        with self._lock:
            if result.failed:
                summary.failed += 1
                return
            summary.processed += 1
            if result.disposition is Disposition.KEEP:
                summary.kept += 1
            else:
                summary.discarded += 1
