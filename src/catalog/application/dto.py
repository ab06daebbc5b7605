"""Data Transfer Objects: plain containers that cross layer boundaries."""

from __future__ import annotations

from dataclasses import dataclass

from catalog.domain.model.product import Product


@dataclass(frozen=True)
class ProductQuery:
    """Input: filters and pagination for listing products.

    ``vendor`` and ``product_type`` are case-insensitive substring filters;
    ``status`` must match exactly. ``limit=None`` returns everything after
    ``offset``.
    """

    status: str | None = None
    vendor: str | None = None
    product_type: str | None = None
    limit: int | None = 10
    offset: int = 0


@dataclass(frozen=True)
class ProductPage:
    """Output: one page of products plus the filtered total."""

    products: list[Product]
    total_count: int
