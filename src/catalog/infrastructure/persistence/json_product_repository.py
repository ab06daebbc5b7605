"""JSON-document implementation of ProductRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from catalog.domain.exceptions import StorageFailure
from catalog.domain.model.product import (
    Image,
    Product,
    ProductStatus,
    Variant,
    WeightUnit,
)
from catalog.domain.repository.product_repository import ProductRepository
from catalog.infrastructure.persistence.json_document_store import JsonDocumentStore

COLLECTION = "products"


class JsonProductRepository(ProductRepository):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- ProductRepository interface ------------------------------------------

    async def find_all(self) -> list[Product]:
        return [self._load(raw) for raw in self._records()]

    async def find_by_id(self, product_id: str) -> Product | None:
        index = self._index_of(product_id)
        if index is None:
            return None
        return self._load(self._records()[index])

    async def create(self, product: Product) -> Product:
        self._records().append(self.to_document(product))
        await self._store.persist()
        return product

    async def update(self, product_id: str, product: Product) -> Product | None:
        index = self._index_of(product_id)
        if index is None:
            return None
        self._records()[index] = self.to_document(product)
        await self._store.persist()
        return product

    async def delete(self, product_id: str) -> bool:
        index = self._index_of(product_id)
        if index is None:
            return False
        del self._records()[index]
        await self._store.persist()
        return True

    # --- Lookup helpers -------------------------------------------------------

    def _records(self) -> list[dict]:
        return self._store.collection(COLLECTION)

    def _index_of(self, product_id: str) -> int | None:
        for i, raw in enumerate(self._records()):
            try:
                record_id = raw["id"]
            except (KeyError, TypeError) as exc:
                raise StorageFailure(f"Corrupt product record at index {i}: missing id") from exc
            if record_id == product_id:
                return i
        return None

    def _load(self, raw: dict) -> Product:
        try:
            return self.from_document(raw)
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            record_id = raw.get("id") if isinstance(raw, dict) else None
            raise StorageFailure(f"Corrupt product record {record_id!r}: {exc!r}") from exc

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_document(product: Product) -> dict:
        return {
            "id": product.id,
            "title": product.title,
            "description": product.description,
            "vendor": product.vendor,
            "productType": product.product_type,
            "tags": list(product.tags),
            "status": product.status.value,
            "variants": [
                {
                    "id": v.id,
                    "title": v.title,
                    "price": str(v.price),
                    "compareAtPrice": (
                        str(v.compare_at_price) if v.compare_at_price is not None else None
                    ),
                    "sku": v.sku,
                    "barcode": v.barcode,
                    "inventoryQuantity": v.inventory_quantity,
                    "weight": v.weight,
                    "weightUnit": v.weight_unit.value,
                    "requiresShipping": v.requires_shipping,
                    "taxable": v.taxable,
                    "createdAt": v.created_at.isoformat(),
                    "updatedAt": v.updated_at.isoformat(),
                }
                for v in product.variants
            ],
            "images": [
                {
                    "id": img.id,
                    "src": img.src,
                    "altText": img.alt_text,
                    "width": img.width,
                    "height": img.height,
                    "createdAt": img.created_at.isoformat(),
                }
                for img in product.images
            ],
            "createdAt": product.created_at.isoformat(),
            "updatedAt": product.updated_at.isoformat(),
        }

    @staticmethod
    def from_document(raw: dict) -> Product:
        variants = [
            Variant(
                id=v["id"],
                title=v["title"],
                price=Decimal(str(v["price"])),
                compare_at_price=(
                    Decimal(str(v["compareAtPrice"]))
                    if v.get("compareAtPrice") is not None
                    else None
                ),
                sku=v.get("sku"),
                barcode=v.get("barcode"),
                inventory_quantity=v.get("inventoryQuantity", 0),
                weight=v.get("weight"),
                weight_unit=WeightUnit(v.get("weightUnit", "GRAMS")),
                requires_shipping=v.get("requiresShipping", True),
                taxable=v.get("taxable", True),
                created_at=datetime.fromisoformat(v["createdAt"]),
                updated_at=datetime.fromisoformat(v["updatedAt"]),
            )
            for v in raw.get("variants", [])
        ]
        images = [
            Image(
                id=img["id"],
                src=img["src"],
                alt_text=img.get("altText"),
                width=img.get("width"),
                height=img.get("height"),
                created_at=datetime.fromisoformat(img["createdAt"]),
            )
            for img in raw.get("images", [])
        ]
        return Product(
            id=raw["id"],
            title=raw["title"],
            description=raw.get("description", ""),
            vendor=raw.get("vendor", ""),
            product_type=raw.get("productType", ""),
            tags=list(raw.get("tags", [])),
            status=ProductStatus(raw.get("status", "DRAFT")),
            variants=variants,
            images=images,
            created_at=datetime.fromisoformat(raw["createdAt"]),
            updated_at=datetime.fromisoformat(raw["updatedAt"]),
        )
