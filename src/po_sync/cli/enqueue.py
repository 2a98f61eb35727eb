"""Enqueue a purchase order by hand.

CLI that validates a JSON order, declares the queue if needed and publishes
the order exactly as the producer would.
"""

import click

from po_sync.cli.common import config_option, get_dsn, load_settings
from po_sync.errors import ChannelError, DecodeError
from po_sync.order_model_dto import PurchaseOrder
from po_sync.pipeline import build_channel


@click.command()
@click.option("--order", type=str, required=True, help="The order to enqueue (JSON with id, vendor_id, amount, currency)")
@click.option("--queue-name", type=str, required=False, help="Override the queue name from the settings")
@click.option("--dsn", type=str, required=False, help="The DSN of the queue database to use")
@config_option
def main(order: str, queue_name: str | None, dsn: str | None, config_file: str | None) -> None:
    """Publish one order to the purchase order queue."""
    settings = load_settings(config_file)
    queue_name = queue_name or settings.queue.name
    click.echo(f"queue-name: {queue_name}")

    try:
        purchase_order = PurchaseOrder.from_payload(order)
    except DecodeError as err:
        raise click.ClickException(f"Invalid order: {order}") from err

    try:
        channel = build_channel(settings, get_dsn(dsn, settings))
    except ChannelError as e:
        raise click.ClickException(str(e)) from e

    try:
        channel.declare(queue_name)
        message_id = channel.publish(queue_name, purchase_order.to_payload())
        click.echo(f"Order {purchase_order.id} enqueued with ID: {message_id}")
    except ChannelError as e:
        raise click.ClickException(f"Error: {e}") from e
    finally:
        channel.close()


if __name__ == "__main__":
    main()
