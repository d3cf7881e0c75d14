import click

from dms.infrastructure.cli.digital_menu_commands import customers_list, orders_list
from dms.infrastructure.cli.sync_commands import (
    sync_once,
    sync_run,
    sync_status,
    table_project,
)
from dms.infrastructure.config import get_settings
from dms.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """DMS: Digital Menu Sync for the restaurant POS"""
    configure_logging(get_settings().log_level)


@cli.group()
def sync() -> None:
    """Run the digital menu sync."""


@cli.group()
def orders() -> None:
    """Inspect digital menu orders."""


@cli.group()
def customers() -> None:
    """Inspect digital menu customers."""


@cli.group()
def table() -> None:
    """Project table status."""


# Register subcommands
sync.add_command(sync_once)
sync.add_command(sync_run)
sync.add_command(sync_status)
orders.add_command(orders_list)
customers.add_command(customers_list)
table.add_command(table_project)
