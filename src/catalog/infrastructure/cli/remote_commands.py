"""CLI commands that pass straight through to the remote commerce platform."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import click

from catalog.domain.exceptions import CatalogError
from catalog.domain.repository.remote_catalog import RemoteCatalogProvider
from catalog.infrastructure.bootstrap import remote_catalog
from catalog.infrastructure.cli.runtime import echo_json, parse_json_payload

DATA_HELP = "JSON, or @file.json."


def _run_remote(
    ctx: click.Context, action: Callable[[RemoteCatalogProvider], Awaitable[Any]]
) -> Any:
    async def _main() -> Any:
        async with remote_catalog(ctx.obj) as client:
            return await action(client)

    try:
        return asyncio.run(_main())
    except CatalogError as exc:
        raise click.ClickException(str(exc))


def _found(result: Any, what: str) -> Any:
    if result is None:
        raise click.ClickException(f"{what} not found")
    return result


# --- Products -----------------------------------------------------------------


@click.command("products")
@click.option("--first", type=int, default=10, show_default=True)
@click.option("--after", help="Cursor from a previous page.")
@click.pass_context
def remote_products(ctx: click.Context, first: int, after: str | None) -> None:
    """List products on the remote store."""
    echo_json(_run_remote(ctx, lambda client: client.list_products(first, after)))


@click.command("product")
@click.argument("product_id")
@click.pass_context
def remote_product(ctx: click.Context, product_id: str) -> None:
    """Show one remote product (numeric id or GID)."""
    product = _run_remote(ctx, lambda client: client.get_product(product_id))
    echo_json(_found(product, f"Product {product_id}"))


@click.command("push")
@click.option("--data", "raw", required=True, help=f"Product as {DATA_HELP}")
@click.pass_context
def remote_push(ctx: click.Context, raw: str) -> None:
    """Create a product on the remote store."""
    payload = parse_json_payload(raw)
    echo_json(_run_remote(ctx, lambda client: client.create_product(payload)))


@click.command("product-update")
@click.argument("product_id")
@click.option("--data", "raw", required=True, help=f"Fields to change as {DATA_HELP}")
@click.pass_context
def remote_product_update(ctx: click.Context, product_id: str, raw: str) -> None:
    """Update a remote product's top-level fields."""
    payload = parse_json_payload(raw)
    echo_json(_run_remote(ctx, lambda client: client.update_product(product_id, payload)))


@click.command("product-delete")
@click.argument("product_id")
@click.pass_context
def remote_product_delete(ctx: click.Context, product_id: str) -> None:
    """Delete a remote product."""
    deleted = _run_remote(ctx, lambda client: client.delete_product(product_id))
    click.echo(f"Deleted {deleted}")


# --- Variants & options -------------------------------------------------------


@click.command("variant")
@click.argument("variant_id")
@click.pass_context
def remote_variant(ctx: click.Context, variant_id: str) -> None:
    """Show one remote variant."""
    variant = _run_remote(ctx, lambda client: client.get_variant(variant_id))
    echo_json(_found(variant, f"Variant {variant_id}"))


@click.command("variants")
@click.argument("product_id")
@click.option("--first", type=int, default=10, show_default=True)
@click.option("--after", help="Cursor from a previous page.")
@click.pass_context
def remote_variants(ctx: click.Context, product_id: str, first: int, after: str | None) -> None:
    """List the variants of a remote product."""
    echo_json(_run_remote(ctx, lambda client: client.list_variants(product_id, first, after)))


@click.command("variants-by-ids")
@click.argument("variant_ids", nargs=-1, required=True)
@click.pass_context
def remote_variants_by_ids(ctx: click.Context, variant_ids: tuple[str, ...]) -> None:
    """Look up several remote variants at once."""
    echo_json(_run_remote(ctx, lambda client: client.get_variants_by_ids(list(variant_ids))))


@click.command("variants-create")
@click.argument("product_id")
@click.option("--data", "raw", required=True, help=f"Array of variants as {DATA_HELP}")
@click.pass_context
def remote_variants_create(ctx: click.Context, product_id: str, raw: str) -> None:
    """Bulk-create variants on a remote product."""
    variants = parse_json_payload(raw, expected=list)
    echo_json(_run_remote(ctx, lambda client: client.create_variants(product_id, variants)))


@click.command("options-create")
@click.argument("product_id")
@click.option(
    "--data",
    "raw",
    required=True,
    help=f'Array like [{{"name": "Size", "values": ["S"]}}] as {DATA_HELP}',
)
@click.pass_context
def remote_options_create(ctx: click.Context, product_id: str, raw: str) -> None:
    """Add options to a remote product."""
    options = parse_json_payload(raw, expected=list)
    echo_json(_run_remote(ctx, lambda client: client.create_options(product_id, options)))


@click.command("option-update")
@click.argument("product_id")
@click.option(
    "--data",
    "raw",
    required=True,
    help=(
        'Object with "option" (must carry its "id") and optional "valuesToAdd", '
        f'"valuesToUpdate" and "valuesToDelete", as {DATA_HELP}'
    ),
)
@click.pass_context
def remote_option_update(ctx: click.Context, product_id: str, raw: str) -> None:
    """Update one option of a remote product and its values."""
    payload = parse_json_payload(raw)
    option = payload.get("option")
    if not isinstance(option, dict) or not option.get("id"):
        raise click.BadParameter('"option" must be an object with an "id".')
    echo_json(
        _run_remote(
            ctx,
            lambda client: client.update_option(
                product_id,
                option,
                values_to_add=payload.get("valuesToAdd"),
                values_to_update=payload.get("valuesToUpdate"),
                values_to_delete=payload.get("valuesToDelete"),
            ),
        )
    )


@click.command("options-delete")
@click.argument("product_id")
@click.argument("option_ids", nargs=-1, required=True)
@click.pass_context
def remote_options_delete(ctx: click.Context, product_id: str, option_ids: tuple[str, ...]) -> None:
    """Remove options from a remote product."""
    echo_json(_run_remote(ctx, lambda client: client.delete_options(product_id, list(option_ids))))


# --- Orders -------------------------------------------------------------------


@click.command("orders")
@click.option("--first", type=int, default=10, show_default=True)
@click.pass_context
def remote_orders(ctx: click.Context, first: int) -> None:
    """List recent orders."""
    echo_json(_run_remote(ctx, lambda client: client.list_orders(first)))


@click.command("order")
@click.argument("order_id")
@click.pass_context
def remote_order(ctx: click.Context, order_id: str) -> None:
    """Show one order with its line items."""
    order = _run_remote(ctx, lambda client: client.get_order(order_id))
    echo_json(_found(order, f"Order {order_id}"))


@click.command("orders-by-ids")
@click.argument("order_ids", nargs=-1, required=True)
@click.pass_context
def remote_orders_by_ids(ctx: click.Context, order_ids: tuple[str, ...]) -> None:
    """Look up several orders at once."""
    echo_json(_run_remote(ctx, lambda client: client.get_orders_by_ids(list(order_ids))))


@click.command("order-metafields")
@click.argument("order_id")
@click.option("--first", type=int, default=10, show_default=True)
@click.pass_context
def remote_order_metafields(ctx: click.Context, order_id: str, first: int) -> None:
    """Show an order's metafields."""
    metafields = _run_remote(ctx, lambda client: client.get_order_metafields(order_id, first))
    echo_json(_found(metafields, f"Order {order_id}"))


@click.command("order-update")
@click.argument("order_id")
@click.option("--data", "raw", required=True, help=f"OrderInput fields as {DATA_HELP}")
@click.pass_context
def remote_order_update(ctx: click.Context, order_id: str, raw: str) -> None:
    """Update an order's note, tags, email or shipping address."""
    payload = parse_json_payload(raw)
    echo_json(_run_remote(ctx, lambda client: client.update_order(order_id, payload)))


@click.command("order-delete")
@click.argument("order_id")
@click.pass_context
def remote_order_delete(ctx: click.Context, order_id: str) -> None:
    """Delete an order."""
    deleted = _run_remote(ctx, lambda client: client.delete_order(order_id))
    click.echo(f"Deleted {deleted}")


# --- Draft orders -------------------------------------------------------------


@click.command("draft-orders")
@click.option("--first", type=int, default=10, show_default=True)
@click.pass_context
def remote_draft_orders(ctx: click.Context, first: int) -> None:
    """List recent draft orders."""
    echo_json(_run_remote(ctx, lambda client: client.list_draft_orders(first)))


@click.command("draft-order-create")
@click.option("--data", "raw", required=True, help=f"DraftOrderInput as {DATA_HELP}")
@click.pass_context
def remote_draft_order_create(ctx: click.Context, raw: str) -> None:
    """Create a draft order."""
    payload = parse_json_payload(raw)
    echo_json(_run_remote(ctx, lambda client: client.create_draft_order(payload)))


@click.command("draft-order-update")
@click.argument("draft_order_id")
@click.option("--data", "raw", required=True, help=f"DraftOrderInput fields as {DATA_HELP}")
@click.pass_context
def remote_draft_order_update(ctx: click.Context, draft_order_id: str, raw: str) -> None:
    """Update a draft order."""
    payload = parse_json_payload(raw)
    echo_json(
        _run_remote(ctx, lambda client: client.update_draft_order(draft_order_id, payload))
    )


@click.command("draft-order-delete")
@click.argument("draft_order_id")
@click.pass_context
def remote_draft_order_delete(ctx: click.Context, draft_order_id: str) -> None:
    """Delete a draft order."""
    deleted = _run_remote(ctx, lambda client: client.delete_draft_order(draft_order_id))
    click.echo(f"Deleted {deleted}")
