"""Application service: the Product aggregate use cases.

Orchestrates validation, ID and timestamp assignment and the lifecycle of
the variants and images a product owns, then persists through the
ProductRepository.

Conventions shared by every operation:

* A missing product (or nested variant/image) yields ``None``; it is not
  an error.
* Bad input raises ``ValidationError`` carrying every violation found.
* Removing the last variant raises ``InvariantViolation``.
* Storage errors propagate untouched as ``StorageFailure``.

Read-modify-write operations on the same product ID are serialized, so
two concurrent updates of one product cannot lose each other's changes
within this process.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from catalog.application.dto import ProductPage, ProductQuery
from catalog.domain.exceptions import InvariantViolation, ValidationError
from catalog.domain.model.product import (
    PRODUCT_FIELDS,
    VARIANT_FIELDS,
    Image,
    Product,
    Variant,
    merge_fields,
)
from catalog.domain.repository.product_repository import ProductRepository
from catalog.domain.validation import (
    ValidationResult,
    validate_image,
    validate_product,
    validate_product_update,
    validate_variant,
    validate_variant_update,
)
from catalog.infrastructure.logging import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


def _raise_if_invalid(result: ValidationResult) -> None:
    if not result.is_valid:
        raise ValidationError(result.errors)


def _contains(haystack: str | None, needle: str) -> bool:
    return needle in (haystack or "").lower()


class _KeyedLock:
    """One asyncio.Lock per key, dropped again once nobody holds it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if not self._waiters[key]:
                del self._waiters[key]
                del self._locks[key]


class ProductService:

    def __init__(
        self,
        product_repo: ProductRepository,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._clock = clock or _utcnow
        self._new_id = id_factory or _new_id
        self._locks = _KeyedLock()

    # --- Queries --------------------------------------------------------------

    async def get_all_products(self, query: ProductQuery | None = None) -> ProductPage:
        """Filter conjunctively, then paginate (offset first, then limit)."""
        query = query or ProductQuery()
        products = await self._product_repo.find_all()

        if query.status:
            status = getattr(query.status, "value", query.status)
            products = [p for p in products if p.status.value == status]
        if query.vendor:
            vendor = query.vendor.lower()
            products = [p for p in products if _contains(p.vendor, vendor)]
        if query.product_type:
            product_type = query.product_type.lower()
            products = [p for p in products if _contains(p.product_type, product_type)]

        total_count = len(products)
        start = max(query.offset, 0)
        end = None if query.limit is None else start + max(query.limit, 0)
        return ProductPage(products=products[start:end], total_count=total_count)

    async def get_product_by_id(self, product_id: str) -> Product | None:
        return await self._product_repo.find_by_id(product_id)

    async def search_products(self, query: str, limit: int | None = 10) -> list[Product]:
        """Case-insensitive substring match on title, description and tags."""
        needle = query.lower()
        matches = [
            p
            for p in await self._product_repo.find_all()
            if _contains(p.title, needle)
            or _contains(p.description, needle)
            or any(_contains(tag, needle) for tag in p.tags)
        ]
        if limit is None:
            return matches
        return matches[: max(limit, 0)]

    # --- Product commands -----------------------------------------------------

    async def create_product(self, data: Mapping[str, Any]) -> Product:
        _raise_if_invalid(validate_product(data))

        # One instant for the product and everything created with it.
        now = self._clock()
        product = Product(
            id=self._new_id(),
            title=data["title"],
            created_at=now,
            updated_at=now,
        )
        merge_fields(product, data, PRODUCT_FIELDS)
        product.variants = [
            Variant.from_input(v, id=self._new_id(), now=now) for v in data["variants"]
        ]
        product.images = [
            Image.from_input(img, id=self._new_id(), now=now) for img in data.get("images") or []
        ]

        created = await self._product_repo.create(product)
        logger.info(
            "product_created",
            product_id=created.id,
            variants=len(created.variants),
            images=len(created.images),
        )
        return created

    async def update_product(self, product_id: str, data: Mapping[str, Any]) -> Product | None:
        """Merge the allow-listed top-level fields of *data* over the product.

        Variants and images are managed through their own operations and are
        never replaced by this call.
        """
        async with self._locks.hold(product_id):
            product = await self._product_repo.find_by_id(product_id)
            if product is None:
                return None
            _raise_if_invalid(validate_product_update(data))

            merge_fields(product, data, PRODUCT_FIELDS)
            product.touch(self._clock())
            updated = await self._product_repo.update(product_id, product)
        logger.info(
            "product_updated",
            product_id=product_id,
            fields=sorted(set(data) & set(PRODUCT_FIELDS)),
        )
        return updated

    async def delete_product(self, product_id: str) -> bool:
        async with self._locks.hold(product_id):
            deleted = await self._product_repo.delete(product_id)
        if deleted:
            logger.info("product_deleted", product_id=product_id)
        return deleted

    # --- Variant commands -----------------------------------------------------

    async def add_product_variant(
        self, product_id: str, data: Mapping[str, Any]
    ) -> Product | None:
        async with self._locks.hold(product_id):
            product = await self._product_repo.find_by_id(product_id)
            if product is None:
                return None
            _raise_if_invalid(validate_variant(data))

            now = self._clock()
            variant = Variant.from_input(data, id=self._new_id(), now=now)
            product.add_variant(variant, now)
            updated = await self._product_repo.update(product_id, product)
        logger.info("variant_added", product_id=product_id, variant_id=variant.id)
        return updated

    async def update_product_variant(
        self, product_id: str, data: Mapping[str, Any]
    ) -> Product | None:
        """Merge *data* over the variant whose id is ``data["id"]``."""
        async with self._locks.hold(product_id):
            product = await self._product_repo.find_by_id(product_id)
            if product is None:
                return None
            variant = product.find_variant(data.get("id"))
            if variant is None:
                return None
            _raise_if_invalid(validate_variant_update(data))

            now = self._clock()
            merge_fields(variant, data, VARIANT_FIELDS)
            variant.updated_at = now
            product.touch(now)
            updated = await self._product_repo.update(product_id, product)
        logger.info("variant_updated", product_id=product_id, variant_id=variant.id)
        return updated

    async def remove_product_variant(self, product_id: str, variant_id: str) -> Product | None:
        async with self._locks.hold(product_id):
            product = await self._product_repo.find_by_id(product_id)
            if product is None:
                return None
            try:
                removed = product.remove_variant(variant_id, self._clock())
            except InvariantViolation:
                logger.warning("variant_removal_refused", product_id=product_id, variant_id=variant_id)
                raise
            if not removed:
                return None
            updated = await self._product_repo.update(product_id, product)
        logger.info("variant_removed", product_id=product_id, variant_id=variant_id)
        return updated

    # --- Image commands -------------------------------------------------------

    async def add_product_image(self, product_id: str, data: Mapping[str, Any]) -> Product | None:
        async with self._locks.hold(product_id):
            product = await self._product_repo.find_by_id(product_id)
            if product is None:
                return None
            _raise_if_invalid(validate_image(data))

            now = self._clock()
            image = Image.from_input(data, id=self._new_id(), now=now)
            product.add_image(image, now)
            updated = await self._product_repo.update(product_id, product)
        logger.info("image_added", product_id=product_id, image_id=image.id)
        return updated

    async def remove_product_image(self, product_id: str, image_id: str) -> Product | None:
        async with self._locks.hold(product_id):
            product = await self._product_repo.find_by_id(product_id)
            if product is None:
                return None
            if not product.remove_image(image_id, self._clock()):
                return None
            updated = await self._product_repo.update(product_id, product)
        logger.info("image_removed", product_id=product_id, image_id=image_id)
        return updated
