"""Administer the purchase order queue.

CLI that creates, inspects, purges or destroys the queue.
"""

import click
from icecream import ic

from po_sync.cli.common import config_option, get_dsn, load_settings
from po_sync.errors import ChannelError
from po_sync.pipeline import build_channel


@click.command()
@click.option("--queue-name", type=str, required=False, help="Override the queue name from the settings")
@click.option("--dsn", type=str, required=False, help="The DSN of the queue database to use")
@click.option(
    "--action",
    type=str,
    required=True,
    help="The action to perform on the queue: create, status, purge, destroy",
)
@config_option
def main(queue_name: str | None, dsn: str | None, action: str, config_file: str | None) -> bool | dict | int | None:
    """Perform the action on the queue and print the result."""
    settings = load_settings(config_file)
    queue_name = queue_name or settings.queue.name
    click.echo(f"Queue {queue_name} {action}")

    try:
        channel = build_channel(settings, get_dsn(dsn, settings))
    except ChannelError as e:
        raise click.ClickException(str(e)) from e

    try:
        match action:
            case "create":
                channel.declare(queue_name)
                click.echo(f"Queue {queue_name} created")
                return None
            case "status":
                if queue_name not in channel.list_queues():
                    raise click.ClickException(f"Queue {queue_name} does not exist")
                metrics = channel.metrics(queue_name)
                ic(metrics)
                return metrics
            case "purge":
                purged_count = channel.purge(queue_name)
                click.echo(f"Queue {queue_name} purged ({purged_count} messages)")
                return purged_count
            case "destroy":
                channel.destroy(queue_name)
                click.echo(f"Queue {queue_name} destroyed")
                return True
            case _:
                raise click.ClickException(
                    f"Invalid action: {action}. Valid actions are: create, status, purge, destroy"
                )
    except ChannelError as e:
        raise click.ClickException(f"Error: {e}") from e
    finally:
        channel.close()


if __name__ == "__main__":
    main()
