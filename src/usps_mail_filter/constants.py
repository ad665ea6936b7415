"""Constants for USPS Mail Filter."""

import os
from pathlib import Path

# --- Config paths ---
ENV_HOME = "USPS_MAIL_FILTER_HOME"
DEFAULT_CONFIG_DIR = Path.home() / ".usps-mail-filter"
CREDENTIALS_FILE = "credentials.json"
TOKEN_FILE = "token.json"
RUN_LOG_FILE = "run_log.json"


def config_dir() -> Path:
    """Directory holding credentials, token and run log.

    Read at call time so a value loaded from .env is honored.
    """
    return Path(os.environ.get(ENV_HOME) or DEFAULT_CONFIG_DIR)


# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]
USER_ID = "me"
PAGE_SIZE = 500  # messages per list page
INBOX_LABEL = "INBOX"
NO_SUBJECT = "No Subject"

# --- Search ---
DEFAULT_SENDER_ADDRESS = "USPSInformeddelivery@email.informeddelivery.usps.com"
DEFAULT_LABEL_NAME = "USPS"
LOOKBACK_DAYS = 2
QUERY_DATE_FORMAT = "%Y/%m/%d"

# --- Environment variables ---
ENV_TARGET_NAMES = "TARGET_NAMES"
ENV_TARGET_NAMES_JSON = "TARGET_NAMES_JSON"
ENV_DENY_NAMES = "DENY_NAMES"
ENV_DENY_NAMES_JSON = "DENY_NAMES_JSON"
ENV_SENDER_ADDRESS = "SENDER_ADDRESS"
ENV_LABEL_NAME = "USPS_LABEL"
ENV_MESSAGE_WORKERS = "MESSAGE_WORKERS"
ENV_OCR_WORKERS = "OCR_WORKERS"

# --- OCR ---
TEXTRACT_LINE_BLOCK = "LINE"
