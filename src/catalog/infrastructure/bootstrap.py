"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

The document store is created explicitly, loaded before the first
operation and closed (flushed) on shutdown; nothing holds it globally.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from catalog.application.product_service import ProductService
from catalog.infrastructure.config import Settings
from catalog.infrastructure.persistence.json_document_store import JsonDocumentStore
from catalog.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from catalog.infrastructure.remote.shopify_client import ShopifyCatalogClient


@asynccontextmanager
async def open_store(data_file: Path) -> AsyncIterator[JsonDocumentStore]:
    store = JsonDocumentStore(data_file)
    await store.load()
    try:
        yield store
    finally:
        await store.close()


def product_service(store: JsonDocumentStore) -> ProductService:
    return ProductService(product_repo=JsonProductRepository(store))


def remote_catalog(settings: Settings) -> ShopifyCatalogClient:
    return ShopifyCatalogClient.from_settings(settings)
