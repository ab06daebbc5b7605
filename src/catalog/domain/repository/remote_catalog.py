"""Abstract remote catalog provider.

The external commerce platform that the gateway proxies to in pass-through
mode. Entities are addressed by GIDs; implementations accept bare numeric
ids as well and normalize them. Results are the platform's own documents,
returned as plain dicts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class RemoteCatalogProvider(ABC):

    # --- Products -------------------------------------------------------------

    @abstractmethod
    async def list_products(self, first: int = 10, after: str | None = None) -> dict[str, Any]:
        """Return ``{"products": [...], "pageInfo": {...}}``."""

    @abstractmethod
    async def get_product(self, product_id: str) -> dict[str, Any] | None:
        """Return one product with its variants and images, or None."""

    @abstractmethod
    async def create_product(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create a product from catalog-style input."""

    @abstractmethod
    async def update_product(self, product_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update the given top-level fields of a product."""

    @abstractmethod
    async def delete_product(self, product_id: str) -> str:
        """Delete a product, returning the deleted GID."""

    # --- Variants & options ---------------------------------------------------

    @abstractmethod
    async def get_variant(self, variant_id: str) -> dict[str, Any] | None:
        """Return one variant, or None."""

    @abstractmethod
    async def get_variants_by_ids(self, variant_ids: list[str]) -> list[dict[str, Any] | None]:
        """Batch lookup; unknown ids yield None, in input order."""

    @abstractmethod
    async def list_variants(
        self, product_id: str, first: int = 10, after: str | None = None
    ) -> dict[str, Any]:
        """Return ``{"variants": [...], "pageInfo": {...}}`` for a product."""

    @abstractmethod
    async def create_variants(
        self, product_id: str, variants: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Bulk-create variants on a product."""

    @abstractmethod
    async def create_options(
        self, product_id: str, options: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Add options (e.g. Size, Color) to a product."""

    @abstractmethod
    async def delete_options(self, product_id: str, option_ids: list[str]) -> list[str]:
        """Remove options from a product, returning the deleted option ids."""

    @abstractmethod
    async def update_option(
        self,
        product_id: str,
        option: dict[str, Any],
        values_to_add: list[dict[str, Any]] | None = None,
        values_to_update: list[dict[str, Any]] | None = None,
        values_to_delete: list[str] | None = None,
    ) -> dict[str, Any]:
        """Rename or reposition an option and add, change or drop its values."""

    # --- Orders ---------------------------------------------------------------

    @abstractmethod
    async def list_orders(self, first: int = 10) -> list[dict[str, Any]]:
        """Return the most recent orders."""

    @abstractmethod
    async def get_order(self, order_id: str) -> dict[str, Any] | None:
        """Return one order with its line items, or None."""

    @abstractmethod
    async def delete_order(self, order_id: str) -> str:
        """Delete an order, returning the deleted id."""

    @abstractmethod
    async def get_orders_by_ids(self, order_ids: list[str]) -> list[dict[str, Any] | None]:
        """Batch lookup; unknown ids yield None, in input order."""

    @abstractmethod
    async def get_order_metafields(
        self, order_id: str, first: int = 10
    ) -> list[dict[str, Any]] | None:
        """Return an order's metafields, or None if the order does not exist."""

    @abstractmethod
    async def update_order(self, order_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update editable order fields (note, tags, email, shipping address)."""

    # --- Draft orders ---------------------------------------------------------

    @abstractmethod
    async def list_draft_orders(self, first: int = 10) -> list[dict[str, Any]]:
        """Return the most recent draft orders."""

    @abstractmethod
    async def create_draft_order(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create a draft order from a DraftOrderInput-shaped dict."""

    @abstractmethod
    async def update_draft_order(self, draft_order_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a draft order from a DraftOrderInput-shaped dict."""

    @abstractmethod
    async def delete_draft_order(self, draft_order_id: str) -> str:
        """Delete a draft order, returning the deleted GID."""
