"""Helpers shared by the po-sync command line entry points."""

import logging
import os

import click
import dotenv

from config import Settings, get_settings
from po_sync.errors import ConfigError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

config_option = click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    required=False,
    help="JSON config file, defaults to $PO_SYNC_CONFIG or ./config.json",
)
log_level_option = click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Root log level",
)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def load_settings(config_file: str | None) -> Settings:
    """Load .env (if any) and the settings; configuration errors become ClickException."""
    if os.path.exists(".env"):
        dotenv.load_dotenv()
    try:
        return get_settings(config_file)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def get_dsn(dsn: str | None, settings: Settings) -> str:
    """Return the queue DSN from the option, $PGMQ_DSN, or the settings."""
    return dsn or os.getenv("PGMQ_DSN") or settings.queue_dsn
