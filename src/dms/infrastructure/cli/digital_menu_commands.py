"""CLI commands that read the digital menu without syncing."""

from __future__ import annotations

import click

from dms.application.list_external_orders import (
    ListExternalOrdersHandler,
    ListLoggedInCustomersHandler,
)
from dms.domain.exceptions import DomainException
from dms.infrastructure.bootstrap import external_order_source


@click.command("list")
def orders_list() -> None:
    """List digital menu orders with their sync flags."""
    handler = ListExternalOrdersHandler(source=external_order_source())

    try:
        orders = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No digital menu orders found.")
        return

    click.echo(
        f"{'Order':<26} {'Customer':<16} {'Status':<12} {'Payment':<18} "
        f"{'Table':<16} {'Total':>9}  {'POS order'}"
    )
    click.echo("-" * 110)
    for o in orders:
        pos = o.pos_order_id if o.synced else "(not synced)"
        click.echo(
            f"{o.order_id:<26} {o.customer_name:<16} {o.status:<12} {o.payment_status:<18} "
            f"{o.table:<16} {o.total:>9}  {pos}"
        )


@click.command("list")
def customers_list() -> None:
    """List customers currently logged in to the digital menu."""
    handler = ListLoggedInCustomersHandler(source=external_order_source())

    try:
        customers = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not customers:
        click.echo("No logged-in customers.")
        return

    click.echo(f"{'Name':<20} {'Phone':<16} {'Table':<8} {'Table status'}")
    click.echo("-" * 60)
    for c in customers:
        click.echo(
            f"{c.get('name') or '':<20} {c.get('phoneNumber') or '':<16} "
            f"{c.get('tableNumber') or '-':<8} {c.get('tableStatus') or '-'}"
        )
