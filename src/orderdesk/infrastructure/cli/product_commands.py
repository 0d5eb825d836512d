"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.pagination import PageRequest
from orderdesk.infrastructure.cli.context import AppContext, identity_from_options

_admin_options = [
    click.option("--user", required=True, help="Administrator's user ID."),
    click.option(
        "--role",
        type=click.Choice(["user", "admin"]),
        default="admin",
        show_default=True,
        help="Caller's role.",
    ),
]


def _with_admin(command):
    for option in reversed(_admin_options):
        command = option(command)
    return command


@click.command("add")
@_with_admin
@click.option("--name", required=True, help="Product name.")
@click.option("--description", required=True, help="Product description.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Initial stock.")
@click.option("--category", required=True, help="Category.")
@click.pass_obj
def product_add(
    app: AppContext,
    user: str,
    role: str,
    name: str,
    description: str,
    price: str,
    stock: int,
    category: str,
) -> None:
    """Add a new product to the catalog."""
    identity = identity_from_options(user, role)

    try:
        product = app.services.add_product.handle(
            identity, name, description, price, stock, category
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product {product.id} '{product.name}' added at ${product.price:.2f} "
        f"(stock {product.stock})"
    )


@click.command("list")
@click.option("--category", default=None, help="Only this category.")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
@click.pass_obj
def product_list(
    app: AppContext, category: str | None, page: int, limit: int
) -> None:
    """List active products in the catalog."""
    try:
        result = app.services.list_products.handle(
            PageRequest(page=page, page_size=limit), category
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<38} {'Name':<20} {'Price':>10} {'Stock':>7}")
    click.echo("-" * 78)
    for p in result.items:
        click.echo(
            f"{p.id:<38} {p.name[:20]:<20} {'$' + format(p.price, '.2f'):>10} {p.stock:>7}"
        )
    click.echo(
        f"Page {result.page_number}/{result.total_pages} "
        f"({result.total_size} products)"
    )


@click.command("show")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.pass_obj
def product_show(app: AppContext, product_id: str) -> None:
    """Show one catalog product."""
    try:
        p = app.services.show_product.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {p.id}  (category={p.category})")
    click.echo(f"  {p.name}: ${p.price:.2f}, {p.stock} in stock")
    click.echo(f"  {p.description}")


@click.command("update")
@_with_admin
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", default=None, help="New name.")
@click.option("--description", default=None, help="New description.")
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--category", default=None, help="New category.")
@click.pass_obj
def product_update(
    app: AppContext,
    user: str,
    role: str,
    product_id: str,
    name: str | None,
    description: str | None,
    price: str | None,
    category: str | None,
) -> None:
    """Edit a product. Existing orders keep their snapshot."""
    identity = identity_from_options(user, role)

    try:
        product = app.services.update_product.handle(
            identity, product_id, name, description, price, category
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} updated: '{product.name}' at ${product.price:.2f}")


@click.command("restock")
@_with_admin
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units to add.")
@click.pass_obj
def product_restock(
    app: AppContext, user: str, role: str, product_id: str, quantity: int
) -> None:
    """Add stock to a product."""
    identity = identity_from_options(user, role)

    try:
        product = app.services.restock_product.handle(identity, product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} stock is now {product.stock}")


@click.command("retire")
@_with_admin
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.pass_obj
def product_retire(app: AppContext, user: str, role: str, product_id: str) -> None:
    """Retire a product so it can no longer be ordered."""
    identity = identity_from_options(user, role)

    try:
        app.services.retire_product.handle(identity, product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} retired.")
