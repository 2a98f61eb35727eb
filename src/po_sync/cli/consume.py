"""Consume the purchase order queue and sync each order to the ERP.

The queue must be reachable at startup; otherwise the command exits with a
non-zero status.
"""

import click

from po_sync.cli.common import config_option, configure_logging, get_dsn, load_settings, log_level_option
from po_sync.errors import ChannelError, PipelineError, SetupError
from po_sync.pipeline import build_channel, build_consumer, build_reporter


@click.command()
@config_option
@click.option("--dsn", type=str, required=False, help="The DSN of the queue database to use")
@log_level_option
def main(config_file: str | None, dsn: str | None, log_level: str) -> None:
    """Sync queued orders to the ERP until interrupted."""
    configure_logging(log_level)
    settings = load_settings(config_file)
    if not settings.erp.api_url:
        raise click.ClickException("No ERP API URL configured (erp.api_url)")

    try:
        channel = build_channel(settings, get_dsn(dsn, settings))
    except ChannelError as e:
        raise click.ClickException(f"Consumer setup failed: {e}") from e

    reporter = build_reporter(settings)
    consumer = build_consumer(settings, channel, reporter)
    try:
        summary = consumer.run()
        click.echo(f"Synced {summary.synced}, failed {summary.failed}, dropped {summary.dropped}")
    except SetupError as e:
        raise click.ClickException(f"Consumer setup failed: {e}") from e
    except PipelineError as e:
        raise click.ClickException(f"Consumer stopped: {e}") from e
    except KeyboardInterrupt:
        click.echo("Interrupted, shutting down")
    finally:
        channel.close()
        consumer.handler.close()
        reporter.close()


if __name__ == "__main__":
    main()
