"""CLI commands for the digital menu sync service."""

from __future__ import annotations

import time

import click

from dms.application.project_table_status import ProjectTableStatusHandler
from dms.domain.exceptions import DomainException
from dms.infrastructure.bootstrap import (
    event_publisher,
    external_order_source,
    pos_repository,
    sync_scheduler,
)
from dms.infrastructure.config import get_settings


@click.command("once")
def sync_once() -> None:
    """Run a single sync pass and exit."""
    scheduler = sync_scheduler()
    scheduler.load_state()
    count = scheduler.sync_orders()
    click.echo(f"Synced {count} digital menu order(s).")


@click.command("run")
@click.option(
    "--interval",
    type=float,
    default=None,
    help="Seconds between passes (defaults to DMS_SYNC_INTERVAL_SECONDS).",
)
def sync_run(interval: float | None) -> None:
    """Poll the digital menu until interrupted."""
    interval = interval or get_settings().sync_interval_seconds
    if interval <= 0:
        raise click.BadParameter("Interval must be positive.", param_hint="--interval")

    scheduler = sync_scheduler()
    scheduler.start(interval)
    click.echo(f"Polling every {interval}s, press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()
        scheduler.join(timeout=interval)
    click.echo(f"Stopped. {scheduler.get_sync_status().processed_orders} order(s) synced so far.")


@click.command("status")
def sync_status() -> None:
    """Show how many digital menu orders are already in the POS."""
    scheduler = sync_scheduler()
    scheduler.load_state()
    status = scheduler.get_sync_status()
    click.echo(f"Running:          {'yes' if status.is_running else 'no'}")
    click.echo(f"Processed orders: {status.processed_orders}")


@click.command("project")
@click.option("--order-id", required=True, help="POS order ID.")
def table_project(order_id: str) -> None:
    """Recompute a POS order's table status from its items."""
    handler = ProjectTableStatusHandler(
        pos_repo=pos_repository(),
        source=external_order_source(),
        publisher=event_publisher(),
    )

    try:
        status = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if status is None:
        click.echo(f"Order {order_id} has no items; nothing to project.")
    else:
        click.echo(f"Order {order_id} table status: {status.value}")
