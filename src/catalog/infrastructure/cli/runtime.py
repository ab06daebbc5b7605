"""Glue shared by the CLI commands: running coroutines against a freshly
opened store, parsing JSON payloads and printing products.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click

from catalog.application.product_service import ProductService
from catalog.domain.exceptions import CatalogError
from catalog.domain.model.product import Product
from catalog.infrastructure.bootstrap import open_store, product_service
from catalog.infrastructure.config import Settings
from catalog.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)

T = TypeVar("T")


def run_with_service(ctx: click.Context, action: Callable[[ProductService], Awaitable[T]]) -> T:
    """Open the store, run *action* against a ProductService, close the store."""
    settings: Settings = ctx.obj

    async def _main() -> T:
        async with open_store(settings.data_file) as store:
            return await action(product_service(store))

    try:
        return asyncio.run(_main())
    except CatalogError as exc:
        raise click.ClickException(str(exc))


def parse_json_payload(raw: str, expected: type = dict) -> Any:
    """Parse JSON given inline or as ``@path/to/file.json``.

    The top-level value must be an object, or an array when *expected* is
    ``list``.
    """
    if raw.startswith("@"):
        path = raw[1:]
        try:
            with open(path, encoding="utf-8") as fh:
                raw = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise click.BadParameter(f"Cannot read {path}: {exc}")
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise click.BadParameter(f"Invalid JSON: {exc}")
    if not isinstance(payload, expected):
        raise click.BadParameter(
            "Expected a JSON array." if expected is list else "Expected a JSON object."
        )
    return payload


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def echo_product(product: Product) -> None:
    echo_json(JsonProductRepository.to_document(product))


def echo_product_table(products: list[Product]) -> None:
    click.echo(f"{'ID':<34} {'Title':<30} {'Status':<9} {'Variants':>8}")
    click.echo("-" * 84)
    for p in products:
        click.echo(f"{p.id:<34} {p.title[:30]:<30} {p.status.value:<9} {len(p.variants):>8}")
