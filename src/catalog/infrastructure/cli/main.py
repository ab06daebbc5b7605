from pathlib import Path

import click

from catalog.infrastructure.cli.product_commands import (
    product_create,
    product_delete,
    product_list,
    product_search,
    product_show,
    product_update,
)
from catalog.infrastructure.cli.remote_commands import (
    remote_draft_order_create,
    remote_draft_order_delete,
    remote_draft_order_update,
    remote_draft_orders,
    remote_option_update,
    remote_options_create,
    remote_options_delete,
    remote_order,
    remote_order_delete,
    remote_order_metafields,
    remote_order_update,
    remote_orders,
    remote_orders_by_ids,
    remote_product,
    remote_product_delete,
    remote_product_update,
    remote_products,
    remote_push,
    remote_variant,
    remote_variants,
    remote_variants_by_ids,
    remote_variants_create,
)
from catalog.infrastructure.cli.variant_commands import (
    image_add,
    image_remove,
    variant_add,
    variant_remove,
    variant_update,
)
from catalog.infrastructure.config import get_settings
from catalog.infrastructure.logging import configure_logging


@click.group()
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Catalog JSON file (overrides CATALOG_DATA_FILE).",
)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.pass_context
def cli(ctx: click.Context, data_file: Path | None, verbose: bool) -> None:
    """Catalog: products, variants and images, local or remote"""
    settings = get_settings()
    if data_file is not None:
        settings = settings.model_copy(update={"data_file": data_file})
    configure_logging(settings, verbose=verbose)
    ctx.obj = settings


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def variant() -> None:
    """Manage a product's variants."""


@cli.group()
def image() -> None:
    """Manage a product's images."""


@cli.group()
def remote() -> None:
    """Talk to the remote Shopify store."""


# Register subcommands
product.add_command(product_create)
product.add_command(product_delete)
product.add_command(product_list)
product.add_command(product_search)
product.add_command(product_show)
product.add_command(product_update)
variant.add_command(variant_add)
variant.add_command(variant_remove)
variant.add_command(variant_update)
image.add_command(image_add)
image.add_command(image_remove)
remote.add_command(remote_draft_order_create)
remote.add_command(remote_draft_order_delete)
remote.add_command(remote_draft_order_update)
remote.add_command(remote_draft_orders)
remote.add_command(remote_option_update)
remote.add_command(remote_options_create)
remote.add_command(remote_options_delete)
remote.add_command(remote_order)
remote.add_command(remote_order_delete)
remote.add_command(remote_order_metafields)
remote.add_command(remote_order_update)
remote.add_command(remote_orders)
remote.add_command(remote_orders_by_ids)
remote.add_command(remote_product)
remote.add_command(remote_product_delete)
remote.add_command(remote_product_update)
remote.add_command(remote_products)
remote.add_command(remote_push)
remote.add_command(remote_variant)
remote.add_command(remote_variants)
remote.add_command(remote_variants_by_ids)
remote.add_command(remote_variants_create)
