"""Run the whole sync pipeline.

Starts the consumer on a background thread, then polls the order source and
publishes pending orders every interval until interrupted.
"""

import click

from po_sync.cli.common import config_option, configure_logging, get_dsn, load_settings, log_level_option
from po_sync.errors import ChannelError, ConsumerStoppedError, SetupError
from po_sync.pipeline import SyncPipeline, build_channel


@click.command()
@config_option
@click.option("--dsn", type=str, required=False, help="The DSN of the queue database to use")
@click.option(
    "--max-cycles",
    type=int,
    default=None,
    help="Stop after this many producer cycles, default is to run forever",
)
@log_level_option
def main(config_file: str | None, dsn: str | None, max_cycles: int | None, log_level: str) -> None:
    """Run producer and consumer in one process."""
    configure_logging(log_level)
    settings = load_settings(config_file)
    if not settings.erp.api_url:
        raise click.ClickException("No ERP API URL configured (erp.api_url)")

    try:
        channel = build_channel(settings, get_dsn(dsn, settings))
    except ChannelError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"{settings.app_name} {settings.app_version} ({settings.environment}) starting")
    pipeline = SyncPipeline.from_settings(settings, channel=channel)
    try:
        pipeline.run(max_cycles=max_cycles)
    except SetupError as e:
        raise click.ClickException(f"Consumer setup failed: {e}") from e
    except ConsumerStoppedError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        click.echo("Interrupted, shutting down")


if __name__ == "__main__":
    main()
