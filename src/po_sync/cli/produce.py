"""Publish pending purchase orders to the queue.

CLI that runs only the producer side: poll the database and publish every
approved, unsynced order, once or every interval.
"""

import click

from po_sync.cli.common import config_option, configure_logging, get_dsn, load_settings, log_level_option
from po_sync.errors import ChannelError
from po_sync.pipeline import build_channel, build_producer, build_reporter


@click.command()
@config_option
@click.option("--dsn", type=str, required=False, help="The DSN of the queue database to use")
@click.option("--once", is_flag=True, default=False, help="Run a single cycle and exit")
@log_level_option
def main(config_file: str | None, dsn: str | None, once: bool, log_level: str) -> None:
    """Poll for pending orders and publish them to the queue."""
    configure_logging(log_level)
    settings = load_settings(config_file)

    try:
        channel = build_channel(settings, get_dsn(dsn, settings))
    except ChannelError as e:
        raise click.ClickException(str(e)) from e

    reporter = build_reporter(settings)
    producer = build_producer(settings, channel, reporter)
    try:
        if once:
            summary = producer.run_once()
            if summary.fetch_error:
                raise click.ClickException(f"Error fetching orders: {summary.fetch_error}")
            click.echo(f"Published {summary.published} of {summary.fetched} orders ({summary.failed} failed)")
            return
        producer.run()
    except KeyboardInterrupt:
        click.echo("Interrupted, shutting down")
    finally:
        channel.close()
        reporter.close()


if __name__ == "__main__":
    main()
