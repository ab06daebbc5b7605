"""Product aggregate.

A Product owns its Variants and Images outright: they are embedded in the
product document, have no lifecycle of their own and are deleted with it.
All rules that concern more than one nested entity (at least one variant,
timestamp bookkeeping) are enforced here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from catalog.domain.exceptions import InvariantViolation


class ProductStatus(Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    DRAFT = "DRAFT"


class WeightUnit(Enum):
    GRAMS = "GRAMS"
    KILOGRAMS = "KILOGRAMS"
    OUNCES = "OUNCES"
    POUNDS = "POUNDS"


# Input key -> attribute name. Only these keys are ever copied from caller
# input onto an entity; anything else in the payload is ignored.
PRODUCT_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "vendor": "vendor",
    "productType": "product_type",
    "tags": "tags",
    "status": "status",
}

VARIANT_FIELDS: dict[str, str] = {
    "title": "title",
    "price": "price",
    "compareAtPrice": "compare_at_price",
    "sku": "sku",
    "barcode": "barcode",
    "inventoryQuantity": "inventory_quantity",
    "weight": "weight",
    "weightUnit": "weight_unit",
    "requiresShipping": "requires_shipping",
    "taxable": "taxable",
}

IMAGE_FIELDS: dict[str, str] = {
    "src": "src",
    "altText": "alt_text",
    "width": "width",
    "height": "height",
}


def _to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def _coerce(attr: str, value: Any) -> Any:
    """Convert a validated input value to the attribute's domain type."""
    if attr in ("price", "compare_at_price"):
        return _to_decimal(value)
    if attr == "weight_unit":
        return WeightUnit(value) if value is not None else WeightUnit.GRAMS
    if attr == "status":
        return ProductStatus(value) if value is not None else ProductStatus.DRAFT
    if attr == "tags":
        return list(value or [])
    if attr in ("description", "vendor", "product_type"):
        return value or ""
    if attr == "inventory_quantity":
        return value if value is not None else 0
    if attr in ("requires_shipping", "taxable"):
        return True if value is None else value
    return value


def merge_fields(entity: Any, data: Mapping[str, Any], allowed: Mapping[str, str]) -> None:
    """Copy the allow-listed keys present in *data* onto *entity*."""
    for key, attr in allowed.items():
        if key in data:
            setattr(entity, attr, _coerce(attr, data[key]))


@dataclass
class Variant:
    id: str
    title: str
    price: Decimal
    created_at: datetime
    updated_at: datetime
    compare_at_price: Decimal | None = None
    sku: str | None = None
    barcode: str | None = None
    inventory_quantity: int = 0
    weight: float | None = None
    weight_unit: WeightUnit = WeightUnit.GRAMS
    requires_shipping: bool = True
    taxable: bool = True

    @classmethod
    def from_input(cls, data: Mapping[str, Any], *, id: str, now: datetime) -> Variant:
        """Build a new variant from already-validated input."""
        variant = cls(
            id=id,
            title=data["title"],
            price=_to_decimal(data["price"]),
            created_at=now,
            updated_at=now,
        )
        merge_fields(variant, data, VARIANT_FIELDS)
        return variant


@dataclass
class Image:
    id: str
    src: str
    created_at: datetime
    alt_text: str | None = None
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_input(cls, data: Mapping[str, Any], *, id: str, now: datetime) -> Image:
        image = cls(id=id, src=data["src"], created_at=now)
        merge_fields(image, data, IMAGE_FIELDS)
        return image


@dataclass
class Product:
    """A product in the catalog.

    This is the aggregate root: variants and images are only ever reached
    and mutated through it. ``updated_at`` moves on every change to the
    product or to anything it owns; ``created_at`` never moves.
    """

    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    description: str = ""
    vendor: str = ""
    product_type: str = ""
    tags: list[str] = field(default_factory=list)
    status: ProductStatus = ProductStatus.DRAFT
    variants: list[Variant] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)

    # --- Lookup ---------------------------------------------------------------

    def find_variant(self, variant_id: str) -> Variant | None:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def find_image(self, image_id: str) -> Image | None:
        for image in self.images:
            if image.id == image_id:
                return image
        return None

    # --- Mutations ------------------------------------------------------------

    def touch(self, now: datetime) -> None:
        self.updated_at = now

    def add_variant(self, variant: Variant, now: datetime) -> None:
        self.variants.append(variant)
        self.touch(now)

    def remove_variant(self, variant_id: str, now: datetime) -> bool:
        """Remove a variant by id.

        Returns False if no such variant exists. The last remaining variant
        can never be removed: a product without variants cannot be sold.
        """
        variant = self.find_variant(variant_id)
        if variant is None:
            return False
        if len(self.variants) == 1:
            raise InvariantViolation("Cannot remove the last variant")
        self.variants.remove(variant)
        self.touch(now)
        return True

    def add_image(self, image: Image, now: datetime) -> None:
        self.images.append(image)
        self.touch(now)

    def remove_image(self, image_id: str, now: datetime) -> bool:
        image = self.find_image(image_id)
        if image is None:
            return False
        self.images.remove(image)
        self.touch(now)
        return True
