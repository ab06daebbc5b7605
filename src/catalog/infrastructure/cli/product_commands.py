"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from catalog.application.dto import ProductQuery
from catalog.domain.model.product import ProductStatus
from catalog.infrastructure.cli.runtime import (
    echo_json,
    echo_product,
    echo_product_table,
    parse_json_payload,
    run_with_service,
)


@click.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ProductStatus], case_sensitive=False),
    help="Only products with this status.",
)
@click.option("--vendor", help="Vendor contains (case-insensitive).")
@click.option("--type", "product_type", help="Product type contains (case-insensitive).")
@click.option("--limit", type=int, default=10, show_default=True, help="Page size.")
@click.option("--offset", type=int, default=0, show_default=True, help="Products to skip.")
@click.pass_context
def product_list(
    ctx: click.Context,
    status: str | None,
    vendor: str | None,
    product_type: str | None,
    limit: int,
    offset: int,
) -> None:
    """List products in the catalog."""
    query = ProductQuery(
        status=status.upper() if status else None,
        vendor=vendor,
        product_type=product_type,
        limit=limit,
        offset=offset,
    )
    page = run_with_service(ctx, lambda svc: svc.get_all_products(query))

    if not page.products:
        click.echo("No products found.")
        return

    echo_product_table(page.products)
    click.echo(f"\nShowing {len(page.products)} of {page.total_count} product(s)")


@click.command("show")
@click.argument("product_id")
@click.pass_context
def product_show(ctx: click.Context, product_id: str) -> None:
    """Show one product with its variants and images."""
    product = run_with_service(ctx, lambda svc: svc.get_product_by_id(product_id))
    if product is None:
        raise click.ClickException(f"Product {product_id} not found")
    echo_product(product)


@click.command("search")
@click.argument("query")
@click.option("--limit", type=int, default=10, show_default=True)
@click.pass_context
def product_search(ctx: click.Context, query: str, limit: int) -> None:
    """Search titles, descriptions and tags."""
    products = run_with_service(ctx, lambda svc: svc.search_products(query, limit))

    if not products:
        click.echo("No products found.")
        return

    echo_product_table(products)


@click.command("create")
@click.option(
    "--data",
    "raw",
    required=True,
    help="Product as JSON, or @file.json. Must include at least one variant.",
)
@click.pass_context
def product_create(ctx: click.Context, raw: str) -> None:
    """Create a product with its variants and images."""
    payload = parse_json_payload(raw)
    product = run_with_service(ctx, lambda svc: svc.create_product(payload))
    echo_product(product)


@click.command("update")
@click.argument("product_id")
@click.option("--data", "raw", required=True, help="Fields to change as JSON, or @file.json.")
@click.pass_context
def product_update(ctx: click.Context, product_id: str, raw: str) -> None:
    """Update a product's top-level fields."""
    payload = parse_json_payload(raw)
    product = run_with_service(ctx, lambda svc: svc.update_product(product_id, payload))
    if product is None:
        raise click.ClickException(f"Product {product_id} not found")
    echo_product(product)


@click.command("delete")
@click.argument("product_id")
@click.pass_context
def product_delete(ctx: click.Context, product_id: str) -> None:
    """Delete a product together with its variants and images."""
    deleted = run_with_service(ctx, lambda svc: svc.delete_product(product_id))
    if not deleted:
        raise click.ClickException(f"Product {product_id} not found")
    echo_json({"deleted": product_id})
