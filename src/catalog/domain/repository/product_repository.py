"""Abstract repository for the Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON file, in-memory)
live in the infrastructure layer and in the test fakes.

All operations are coroutines: a concrete repository may suspend on
storage I/O. Every mutating operation has persisted the whole collection
by the time it returns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from catalog.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    async def find_all(self) -> list[Product]:
        """Return every product, in stored order."""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    async def create(self, product: Product) -> Product:
        """Append a new product. ID uniqueness is the caller's concern."""

    @abstractmethod
    async def update(self, product_id: str, product: Product) -> Product | None:
        """Replace the product with the given ID, or return None."""

    @abstractmethod
    async def delete(self, product_id: str) -> bool:
        """Remove the product with the given ID; False if there was none."""
