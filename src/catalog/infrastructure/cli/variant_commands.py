"""CLI commands for the variants and images owned by a product."""

from __future__ import annotations

import click

from catalog.infrastructure.cli.runtime import (
    echo_product,
    parse_json_payload,
    run_with_service,
)


def _found(product, product_id: str, what: str | None = None):
    if product is None:
        target = f"Product {product_id}" + (f" or {what}" if what else "")
        raise click.ClickException(f"{target} not found")
    return product


@click.command("add")
@click.argument("product_id")
@click.option("--data", "raw", required=True, help="Variant as JSON, or @file.json.")
@click.pass_context
def variant_add(ctx: click.Context, product_id: str, raw: str) -> None:
    """Add a variant to a product."""
    payload = parse_json_payload(raw)
    product = run_with_service(ctx, lambda svc: svc.add_product_variant(product_id, payload))
    echo_product(_found(product, product_id))


@click.command("update")
@click.argument("product_id")
@click.argument("variant_id")
@click.option("--data", "raw", required=True, help="Fields to change as JSON, or @file.json.")
@click.pass_context
def variant_update(ctx: click.Context, product_id: str, variant_id: str, raw: str) -> None:
    """Update one variant of a product."""
    payload = {**parse_json_payload(raw), "id": variant_id}
    product = run_with_service(ctx, lambda svc: svc.update_product_variant(product_id, payload))
    echo_product(_found(product, product_id, f"variant {variant_id}"))


@click.command("remove")
@click.argument("product_id")
@click.argument("variant_id")
@click.pass_context
def variant_remove(ctx: click.Context, product_id: str, variant_id: str) -> None:
    """Remove a variant. The last variant of a product cannot be removed."""
    product = run_with_service(
        ctx, lambda svc: svc.remove_product_variant(product_id, variant_id)
    )
    echo_product(_found(product, product_id, f"variant {variant_id}"))


@click.command("add")
@click.argument("product_id")
@click.option("--src", required=True, help="Image URL.")
@click.option("--alt", "alt_text", help="Alt text.")
@click.option("--width", type=int)
@click.option("--height", type=int)
@click.pass_context
def image_add(
    ctx: click.Context,
    product_id: str,
    src: str,
    alt_text: str | None,
    width: int | None,
    height: int | None,
) -> None:
    """Attach an image to a product."""
    payload = {"src": src, "altText": alt_text, "width": width, "height": height}
    payload = {k: v for k, v in payload.items() if v is not None}
    product = run_with_service(ctx, lambda svc: svc.add_product_image(product_id, payload))
    echo_product(_found(product, product_id))


@click.command("remove")
@click.argument("product_id")
@click.argument("image_id")
@click.pass_context
def image_remove(ctx: click.Context, product_id: str, image_id: str) -> None:
    """Detach an image from a product."""
    product = run_with_service(ctx, lambda svc: svc.remove_product_image(product_id, image_id))
    echo_product(_found(product, product_id, f"image {image_id}"))
