"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from orderdesk.application.dto import OrderDTO, OrderItemSpec
from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.order import OrderStatus
from orderdesk.domain.model.pagination import OrderFilters, PageRequest
from orderdesk.infrastructure.cli.context import AppContext, identity_from_options

_user_option = click.option("--user", required=True, help="Caller's user ID.")
_role_option = click.option(
    "--role",
    type=click.Choice(["user", "admin"]),
    default="user",
    show_default=True,
    help="Caller's role.",
)


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'PRODUCT_ID:3,PRODUCT_ID:5' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (status={dto.status})")
    click.echo(f"User:     {dto.user_id}")
    click.echo(f"Created:  {dto.created_at.strftime('%Y-%m-%d %H:%M UTC')}")
    if dto.description:
        click.echo(f"Note:     {dto.description}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name[:20]:<20} {item.quantity:>5} "
            f"{'$' + format(item.unit_price, '.2f'):>10} "
            f"{'$' + format(item.line_total, '.2f'):>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {'$' + format(dto.total, '.2f'):>20}")


@click.command("place")
@_user_option
@_role_option
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--description", default=None, help="Optional note for the order.")
@click.pass_obj
def order_place(
    app: AppContext, user: str, role: str, items: str, description: str | None
) -> None:
    """Place a new order."""
    identity = identity_from_options(user, role)
    specs = _parse_items(items)

    try:
        dto = app.services.place_order.handle(identity, specs, description)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Order placed.")
    _display_order(dto)


@click.command("show")
@_user_option
@_role_option
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.pass_obj
def order_show(app: AppContext, user: str, role: str, order_id: str) -> None:
    """Show details of one of your orders."""
    identity = identity_from_options(user, role)

    try:
        dto = app.services.show_order.handle(identity, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@_user_option
@_role_option
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
@click.option(
    "--status",
    type=click.Choice([s.value for s in OrderStatus]),
    default=None,
    help="Only orders in this status.",
)
@click.pass_obj
def order_list(
    app: AppContext, user: str, role: str, page: int, limit: int, status: str | None
) -> None:
    """List your orders, newest first."""
    identity = identity_from_options(user, role)

    try:
        result = app.services.list_orders.handle(
            identity,
            PageRequest(page=page, page_size=limit),
            OrderFilters(status=OrderStatus(status) if status else None),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<38} {'Status':<11} {'Items':>5} {'Total':>12}  Created")
    click.echo("-" * 90)
    for dto in result.items:
        click.echo(
            f"{dto.id:<38} {dto.status:<11} {len(dto.items):>5} "
            f"{'$' + format(dto.total, '.2f'):>12}  "
            f"{dto.created_at.strftime('%Y-%m-%d %H:%M')}"
        )
    click.echo(
        f"Page {result.page_number}/{result.total_pages} "
        f"({result.total_size} orders)"
    )
