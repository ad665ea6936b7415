"""CLI entry point for USPS Mail Filter."""

from __future__ import annotations

import click
import httplib2
from botocore.exceptions import BotoCoreError
from dotenv import find_dotenv, load_dotenv
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from .audit import save_run_log
from .auth import get_gmail_service
from .config import ConfigError, load_config
from .display import display_run_summary, setup_logging
from .gmail_client import GmailMailbox
from .ocr import TextractOcr
from .processor import BatchProcessor


@click.command()
@click.version_option(version="0.1.0", prog_name="usps-mail-filter")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--dry-run", is_flag=True, help="Decide what to do with each message but change nothing.")
def cli(verbose: bool, dry_run: bool) -> None:
    """Keep USPS Informed Delivery emails that mention you, trash the rest.

    Configuration is read from the environment (and a .env file):
    TARGET_NAMES or TARGET_NAMES_JSON are required.
    """
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(verbose)

    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    try:
        service = get_gmail_service()
    except (FileNotFoundError, GoogleAuthError) as e:
        raise click.ClickException(str(e)) from e
    except (HttpError, httplib2.HttpLib2Error, OSError) as e:
        raise click.ClickException(f"Unable to connect to Gmail: {e}") from e

    try:
        ocr = TextractOcr()
    except BotoCoreError as e:
        raise click.ClickException(f"Unable to create Textract client: {e}") from e

    processor = BatchProcessor(GmailMailbox(service), ocr, config, dry_run=dry_run)
    try:
        summary = processor.run()
    except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
        raise click.ClickException(f"Unable to prepare label or search messages: {e}") from e

    if not dry_run:
        save_run_log(summary)
    display_run_summary(summary)
