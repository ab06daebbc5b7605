"""Integration tests for ProductService product-level use cases.

Uses the in-memory fake repository, no file I/O.
"""

import asyncio

import pytest
from structlog.testing import capture_logs

from catalog.application import product_service
from catalog.application.dto import ProductQuery
from catalog.application.product_service import ProductService
from catalog.domain.exceptions import ErrorKind, ValidationError
from catalog.domain.model.product import ProductStatus
from tests.fakes import FakeProductRepository, SequentialIds, SteppingClock


def _setup() -> tuple[ProductService, FakeProductRepository, SteppingClock]:
    repo = FakeProductRepository()
    clock = SteppingClock()
    service = ProductService(repo, clock=clock, id_factory=SequentialIds())
    return service, repo, clock


def _input(title: str = "Shirt", **extra) -> dict:
    data = {"title": title, "variants": [{"title": "S", "price": 10}]}
    data.update(extra)
    return data


async def _seed(service: ProductService) -> None:
    await service.create_product(
        _input("Red Shirt", vendor="Acme Apparel", productType="Shirts", status="ACTIVE",
               tags=["summer", "cotton"])
    )
    await service.create_product(
        _input("Blue Jeans", vendor="Denim Co", productType="Pants", status="ACTIVE",
               description="Classic fit")
    )
    await service.create_product(
        _input("Green Hat", vendor="acme hats", productType="Accessories")
    )
    await service.create_product(
        _input("Old Scarf", vendor="Acme Apparel", productType="Accessories", status="ARCHIVED")
    )


class TestCreateProduct:

    async def test_shirt_scenario(self):
        service, _, _ = _setup()
        product = await service.create_product(_input())
        assert len(product.variants) == 1
        assert product.variants[0].id
        assert product.variants[0].price == 10

    async def test_defaults(self):
        service, _, _ = _setup()
        product = await service.create_product(_input())
        assert product.status is ProductStatus.DRAFT
        assert product.tags == []
        assert product.description == ""
        assert product.vendor == ""
        assert product.product_type == ""
        assert product.images == []

    async def test_one_timestamp_for_product_and_nested_entities(self):
        service, _, _ = _setup()
        product = await service.create_product(
            _input(
                variants=[{"title": "S", "price": 10}, {"title": "M", "price": 12}],
                images=[{"src": "https://example.com/a.png"}],
            )
        )
        stamps = {product.created_at, product.updated_at}
        stamps |= {v.created_at for v in product.variants}
        stamps |= {v.updated_at for v in product.variants}
        stamps |= {img.created_at for img in product.images}
        assert len(stamps) == 1

    async def test_all_ids_are_distinct(self):
        service, _, _ = _setup()
        first = await service.create_product(
            _input(variants=[{"title": "S", "price": 1}, {"title": "M", "price": 2}],
                   images=[{"src": "https://example.com/a.png"}])
        )
        second = await service.create_product(_input())
        ids = [first.id, second.id]
        ids += [v.id for v in first.variants + second.variants]
        ids += [img.id for img in first.images]
        assert len(ids) == len(set(ids))

    async def test_default_ids_are_unique(self):
        service = ProductService(FakeProductRepository())
        created = [await service.create_product(_input()) for _ in range(5)]
        assert len({p.id for p in created}) == 5

    async def test_non_boolean_flags_rejected(self):
        service, repo, _ = _setup()
        with pytest.raises(ValidationError) as info:
            await service.create_product(
                _input(variants=[{"title": "S", "price": 10, "taxable": "false",
                                  "requiresShipping": 0}])
            )
        assert info.value.errors == [
            "Variant 1: Requires shipping must be a boolean",
            "Variant 1: Taxable must be a boolean",
        ]
        assert repo.writes == 0

    async def test_non_finite_price_rejected(self):
        service, repo, _ = _setup()
        with pytest.raises(ValidationError, match="Variant 1: Price must be a number"):
            await service.create_product(_input(variants=[{"title": "S", "price": float("nan")}]))
        assert repo.writes == 0

    async def test_invalid_input_raises_with_every_error(self):
        service, repo, _ = _setup()
        with pytest.raises(ValidationError) as info:
            await service.create_product({"title": "", "variants": [{"title": "S"}]})
        assert info.value.kind is ErrorKind.VALIDATION
        assert info.value.errors == ["Title is required", "Variant 1: Price is required"]
        assert str(info.value) == "Title is required; Variant 1: Price is required"
        assert repo.writes == 0

    async def test_round_trip_through_get(self):
        service, _, _ = _setup()
        created = await service.create_product(
            _input(tags=["a"], images=[{"src": "https://example.com/a.png", "width": 10}])
        )
        fetched = await service.get_product_by_id(created.id)
        assert fetched == created


class TestGetAllProducts:

    async def test_no_filters_counts_everything(self):
        service, _, _ = _setup()
        await _seed(service)
        page = await service.get_all_products(ProductQuery(limit=None))
        assert page.total_count == 4
        assert len(page.products) == 4

    async def test_default_query(self):
        service, _, _ = _setup()
        await _seed(service)
        page = await service.get_all_products()
        assert page.total_count == 4

    async def test_status_filter_is_exact(self):
        service, _, _ = _setup()
        await _seed(service)
        page = await service.get_all_products(ProductQuery(status="ACTIVE"))
        assert {p.title for p in page.products} == {"Red Shirt", "Blue Jeans"}

    async def test_vendor_filter_is_case_insensitive_substring(self):
        service, _, _ = _setup()
        await _seed(service)
        page = await service.get_all_products(ProductQuery(vendor="ACME"))
        assert {p.title for p in page.products} == {"Red Shirt", "Green Hat", "Old Scarf"}

    async def test_filters_are_conjunctive(self):
        service, _, _ = _setup()
        await _seed(service)
        page = await service.get_all_products(
            ProductQuery(vendor="acme", product_type="access", status="DRAFT")
        )
        assert [p.title for p in page.products] == ["Green Hat"]
        assert page.total_count == 1

    async def test_pagination_applies_offset_then_limit(self):
        service, _, _ = _setup()
        await _seed(service)
        page = await service.get_all_products(ProductQuery(limit=2, offset=1))
        assert [p.title for p in page.products] == ["Blue Jeans", "Green Hat"]
        assert page.total_count == 4

    async def test_limit_is_never_exceeded(self):
        service, _, _ = _setup()
        await _seed(service)
        for limit in range(0, 6):
            page = await service.get_all_products(ProductQuery(limit=limit))
            assert len(page.products) <= limit

    async def test_offset_past_end_is_empty(self):
        service, _, _ = _setup()
        await _seed(service)
        page = await service.get_all_products(ProductQuery(offset=50))
        assert page.products == []
        assert page.total_count == 4


class TestSearchAndGet:

    async def test_search_matches_title_description_and_tags(self):
        service, _, _ = _setup()
        await _seed(service)
        assert [p.title for p in await service.search_products("shirt", 10)] == ["Red Shirt"]
        assert [p.title for p in await service.search_products("CLASSIC", 10)] == ["Blue Jeans"]
        assert [p.title for p in await service.search_products("cotton", 10)] == ["Red Shirt"]

    async def test_search_respects_limit(self):
        service, _, _ = _setup()
        await _seed(service)
        assert len(await service.search_products("", 2)) == 2

    async def test_search_without_matches_returns_empty_list(self):
        service, _, _ = _setup()
        await _seed(service)
        assert await service.search_products("nonexistent-term", 10) == []

    async def test_get_unknown_product_returns_none(self):
        service, _, _ = _setup()
        assert await service.get_product_by_id("missing") is None


class TestUpdateProduct:

    async def test_merges_given_fields_only(self):
        service, _, _ = _setup()
        created = await service.create_product(_input(vendor="Acme", tags=["a"]))
        updated = await service.update_product(created.id, {"title": "Tee", "status": "ACTIVE"})
        assert updated.title == "Tee"
        assert updated.status is ProductStatus.ACTIVE
        assert updated.vendor == "Acme"
        assert updated.tags == ["a"]

    async def test_bumps_updated_at_only(self):
        service, _, _ = _setup()
        created = await service.create_product(_input())
        updated = await service.update_product(created.id, {"vendor": "Acme"})
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

    async def test_ignores_fields_outside_allow_list(self):
        service, _, _ = _setup()
        created = await service.create_product(_input())
        updated = await service.update_product(
            created.id, {"id": "other", "variants": [], "createdAt": "2000-01-01"}
        )
        assert updated.id == created.id
        assert len(updated.variants) == 1
        assert updated.created_at == created.created_at

    async def test_status_transitions_are_unrestricted(self):
        service, _, _ = _setup()
        created = await service.create_product(_input(status="ACTIVE"))
        for status in ("ARCHIVED", "DRAFT", "ACTIVE"):
            updated = await service.update_product(created.id, {"status": status})
            assert updated.status.value == status

    async def test_persists_change(self):
        service, _, _ = _setup()
        created = await service.create_product(_input())
        await service.update_product(created.id, {"title": "Tee"})
        assert (await service.get_product_by_id(created.id)).title == "Tee"

    async def test_invalid_update_rejected(self):
        service, _, _ = _setup()
        created = await service.create_product(_input())
        with pytest.raises(ValidationError, match="Title is required"):
            await service.update_product(created.id, {"title": " "})
        assert (await service.get_product_by_id(created.id)).title == "Shirt"

    async def test_null_status_rejected(self):
        service, _, _ = _setup()
        created = await service.create_product(_input(status="ACTIVE"))
        with pytest.raises(ValidationError, match="Status must be one of"):
            await service.update_product(created.id, {"status": None})
        assert (await service.get_product_by_id(created.id)).status is ProductStatus.ACTIVE

    async def test_unknown_product_returns_none(self):
        service, _, _ = _setup()
        assert await service.update_product("missing", {"title": "x"}) is None

    async def test_concurrent_updates_do_not_lose_changes(self):
        service, _, _ = _setup()
        created = await service.create_product(_input())
        await asyncio.gather(
            service.update_product(created.id, {"vendor": "Acme"}),
            service.update_product(created.id, {"productType": "Shirts"}),
        )
        stored = await service.get_product_by_id(created.id)
        assert stored.vendor == "Acme"
        assert stored.product_type == "Shirts"


class TestDeleteProduct:

    async def test_delete_twice(self):
        service, _, _ = _setup()
        created = await service.create_product(_input())
        assert await service.delete_product(created.id) is True
        assert await service.delete_product(created.id) is False
        assert await service.get_product_by_id(created.id) is None


class TestLogging:

    def test_uses_shared_logger_helper(self):
        from catalog.infrastructure import logging as catalog_logging

        assert product_service.get_logger is catalog_logging.get_logger

    async def test_mutations_emit_events(self):
        service, _, _ = _setup()
        with capture_logs() as logs:
            created = await service.create_product(_input())
            await service.delete_product(created.id)
        events = [entry["event"] for entry in logs]
        assert events == ["product_created", "product_deleted"]
