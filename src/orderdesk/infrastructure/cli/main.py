import click
import uvicorn

from orderdesk.config import Settings
from orderdesk.infrastructure.api.app import create_app
from orderdesk.infrastructure.cli.context import AppContext
from orderdesk.infrastructure.cli.order_commands import (
    order_list,
    order_place,
    order_show,
)
from orderdesk.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_restock,
    product_retire,
    product_show,
    product_update,
)
from orderdesk.infrastructure.logging_config import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """orderdesk: order placement engine."""
    if ctx.obj is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level, settings.log_json)
        ctx.obj = AppContext(settings)


@cli.group()
def db() -> None:
    """Manage the database."""


@db.command("init")
@click.pass_obj
def db_init(app: AppContext) -> None:
    """Create all tables (idempotent)."""
    app.store.create_schema()
    click.echo("Database schema is ready.")


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.pass_obj
def serve(app: AppContext, host: str, port: int) -> None:
    """Run the HTTP API."""
    uvicorn.run(create_app(app.services, app.settings), host=host, port=port)


@cli.group()
def order() -> None:
    """Place and view orders."""


@cli.group()
def product() -> None:
    """Manage the product catalog."""


# Register subcommands
order.add_command(order_list)
order.add_command(order_place)
order.add_command(order_show)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_restock)
product.add_command(product_retire)
product.add_command(product_show)
product.add_command(product_update)
