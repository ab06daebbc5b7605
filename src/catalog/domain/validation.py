"""Shape and range checks for catalog input.

These functions never raise on bad *values*: they collect every violation
into a ValidationResult so the caller can report all of them at once. They
only raise ``TypeError`` when called with something that is not a mapping.

Numeric ranges are checked whenever the field is present, including when
its value is zero (``width=0`` is rejected, ``price=0`` is accepted).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping
from urllib.parse import urlparse

from catalog.domain.model.product import ProductStatus, WeightUnit

MAX_TITLE_LENGTH = 255
MAX_PRICE = 999999
MIN_IMAGE_DIMENSION = 1
MAX_IMAGE_DIMENSION = 10000


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @staticmethod
    def of(errors: list[str]) -> ValidationResult:
        return ValidationResult(is_valid=not errors, errors=errors)


# --- Helpers --------------------------------------------------------------


def _require_mapping(value: Any, what: str) -> None:
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} input must be a mapping, got {type(value).__name__}")


def _is_number(value: Any) -> bool:
    """Finite int, float or Decimal. NaN and infinities are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return True


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_valid_url(value: str) -> bool:
    """True for an absolute URL with both a scheme and a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def _check_title(data: Mapping[str, Any], errors: list[str], *, max_length: int | None) -> None:
    title = data.get("title")
    if _is_blank(title):
        errors.append("Title is required")
    elif max_length is not None and len(title) > max_length:
        errors.append(f"Title must be less than {max_length} characters")


def _check_non_negative(
    data: Mapping[str, Any], key: str, label: str, errors: list[str], *, integer: bool = False
) -> None:
    value = data.get(key)
    if value is None:
        return
    if integer and not _is_integer(value):
        errors.append(f"{label} must be an integer")
    elif not _is_number(value):
        errors.append(f"{label} must be a number")
    elif value < 0:
        errors.append(f"{label} must be positive")


def _check_product_fields(data: Mapping[str, Any], errors: list[str], *, partial: bool) -> None:
    if not partial or "title" in data:
        _check_title(data, errors, max_length=MAX_TITLE_LENGTH)

    status = data.get("status")
    if (status is not None or (partial and "status" in data)) and (
        not isinstance(status, str) or status not in ProductStatus._value2member_map_
    ):
        allowed = ", ".join(s.value for s in ProductStatus)
        errors.append(f"Status must be one of {allowed}")

    tags = data.get("tags")
    if tags is not None and (
        not isinstance(tags, list) or not all(isinstance(t, str) for t in tags)
    ):
        errors.append("Tags must be a list of strings")

    for key in ("description", "vendor", "productType"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            errors.append(f"{key} must be a string")


def _check_variant_fields(data: Mapping[str, Any], errors: list[str], *, partial: bool) -> None:
    if not partial or "title" in data:
        _check_title(data, errors, max_length=None)

    if not partial or "price" in data:
        price = data.get("price")
        if price is None:
            errors.append("Price is required")
        elif not _is_number(price):
            errors.append("Price must be a number")
        elif price < 0 or price > MAX_PRICE:
            errors.append(f"Price must be between 0 and {MAX_PRICE}")

    _check_non_negative(data, "compareAtPrice", "Compare at price", errors)
    _check_non_negative(data, "inventoryQuantity", "Inventory quantity", errors, integer=True)
    _check_non_negative(data, "weight", "Weight", errors)

    unit = data.get("weightUnit")
    if (unit is not None or (partial and "weightUnit" in data)) and (
        not isinstance(unit, str) or unit not in WeightUnit._value2member_map_
    ):
        allowed = ", ".join(u.value for u in WeightUnit)
        errors.append(f"Weight unit must be one of {allowed}")

    for key, label in (("requiresShipping", "Requires shipping"), ("taxable", "Taxable")):
        value = data.get(key)
        if value is not None and not isinstance(value, bool):
            errors.append(f"{label} must be a boolean")


def _check_dimension(data: Mapping[str, Any], key: str, errors: list[str]) -> None:
    value = data.get(key)
    if value is None:
        return
    if not _is_integer(value) or not MIN_IMAGE_DIMENSION <= value <= MAX_IMAGE_DIMENSION:
        errors.append(
            f"Image {key} must be between {MIN_IMAGE_DIMENSION} "
            f"and {MAX_IMAGE_DIMENSION} pixels"
        )


# --- Public API -----------------------------------------------------------


def validate_variant(variant: Mapping[str, Any]) -> ValidationResult:
    _require_mapping(variant, "Variant")
    errors: list[str] = []
    _check_variant_fields(variant, errors, partial=False)
    return ValidationResult.of(errors)


def validate_variant_update(variant: Mapping[str, Any]) -> ValidationResult:
    """Like validate_variant, but only checks the keys that are present."""
    _require_mapping(variant, "Variant")
    errors: list[str] = []
    _check_variant_fields(variant, errors, partial=True)
    return ValidationResult.of(errors)


def validate_image(image: Mapping[str, Any]) -> ValidationResult:
    _require_mapping(image, "Image")
    errors: list[str] = []

    src = image.get("src")
    if _is_blank(src):
        errors.append("Image source URL is required")
    elif not is_valid_url(src):
        errors.append("Image source must be a valid URL")

    _check_dimension(image, "width", errors)
    _check_dimension(image, "height", errors)
    return ValidationResult.of(errors)


def validate_product(product: Mapping[str, Any]) -> ValidationResult:
    """Validate a full product, including every nested variant and image.

    Nested errors are prefixed with the 1-based position of the offending
    entry, e.g. ``"Variant 2: Price is required"``.
    """
    _require_mapping(product, "Product")
    errors: list[str] = []
    _check_product_fields(product, errors, partial=False)

    variants = product.get("variants")
    if not variants:
        errors.append("At least one variant is required")
    elif not isinstance(variants, list):
        errors.append("Variants must be a list")
    else:
        for index, variant in enumerate(variants, start=1):
            if not isinstance(variant, Mapping):
                errors.append(f"Variant {index}: must be an object")
                continue
            errors.extend(f"Variant {index}: {e}" for e in validate_variant(variant).errors)

    images = product.get("images")
    if images is not None and not isinstance(images, list):
        errors.append("Images must be a list")
    elif images:
        for index, image in enumerate(images, start=1):
            if not isinstance(image, Mapping):
                errors.append(f"Image {index}: must be an object")
                continue
            errors.extend(f"Image {index}: {e}" for e in validate_image(image).errors)

    return ValidationResult.of(errors)


def validate_product_update(product: Mapping[str, Any]) -> ValidationResult:
    """Check the top-level fields present in a partial product update."""
    _require_mapping(product, "Product")
    errors: list[str] = []
    _check_product_fields(product, errors, partial=True)
    return ValidationResult.of(errors)
