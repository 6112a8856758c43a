"""Product commands -- ``factuursturen products ...``.

Thin wrappers over the product operations of
:class:`~factuursturen.client.FactuurSturenClient`. Lists are printed as a
table; single products as a JSON-like record.
"""

from __future__ import annotations

from typing import Optional

import typer

from factuursturen.client import FactuurSturenClient
from factuursturen.commands import run_with_client
from factuursturen.exceptions import NotFoundError
from factuursturen.models import Product
from factuursturen.output import format_response, print_table, success

products_app = typer.Typer(no_args_is_help=True)

_HEADERS = ["id", "code", "name", "price", "taxes"]


def _row(product: Product) -> list[str]:
    return [
        str(product.id),
        product.code or "",
        product.name,
        f"{product.price:.2f}",
        str(product.taxes),
    ]


@products_app.command("list")
def products_list(ctx: typer.Context) -> None:
    """List all products.

    Example::

        factuursturen products list --json
    """
    products = run_with_client(ctx, lambda client: client.get_products())
    print_table(_HEADERS, [_row(p) for p in products], title="Products")


@products_app.command("get")
def products_get(
    ctx: typer.Context,
    product_id: int = typer.Argument(help="Product id."),
) -> None:
    """Show one product."""

    async def _get(client: FactuurSturenClient) -> Product:
        product = await client.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    product = run_with_client(ctx, _get)
    format_response(product.model_dump(mode="json"))


@products_app.command("create")
def products_create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Product name."),
    price: float = typer.Option(..., "--price", help="Price excluding tax."),
    code: Optional[str] = typer.Option(None, "--code", help="Product code."),
    taxes: int = typer.Option(21, "--taxes", help="Tax percentage."),
) -> None:
    """Create a product and print the id the service assigned.

    Example::

        factuursturen products create --name "Consult" --price 95
    """
    product = Product(name=name, price=price, code=code, taxes=taxes)
    created = run_with_client(ctx, lambda client: client.create_product(product))
    success(f"Created product {created.id}")
    format_response(created.model_dump(mode="json"))


@products_app.command("update")
def products_update(
    ctx: typer.Context,
    product_id: int = typer.Argument(help="Product id."),
    name: Optional[str] = typer.Option(None, "--name", help="New name."),
    price: Optional[float] = typer.Option(None, "--price", help="New price excluding tax."),
    code: Optional[str] = typer.Option(None, "--code", help="New product code."),
    taxes: Optional[int] = typer.Option(None, "--taxes", help="New tax percentage."),
) -> None:
    """Change fields of an existing product. Only the given options are changed."""
    changes = {
        key: value
        for key, value in {"name": name, "price": price, "code": code, "taxes": taxes}.items()
        if value is not None
    }

    async def _update(client: FactuurSturenClient) -> Product:
        product = await client.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        # The cached instance stays as is until the service accepts the change.
        return await client.update_product(product.model_copy(update=changes))

    updated = run_with_client(ctx, _update)
    success(f"Updated product {updated.id}")
    format_response(updated.model_dump(mode="json"))


@products_app.command("delete")
def products_delete(
    ctx: typer.Context,
    product_id: int = typer.Argument(help="Product id."),
) -> None:
    """Delete a product."""
    run_with_client(ctx, lambda client: client.delete_product_by_id(product_id))
    success(f"Deleted product {product_id}")
