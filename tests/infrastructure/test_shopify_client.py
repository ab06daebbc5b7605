"""Tests for the Shopify remote catalog client, against a mocked transport."""

import json

import httpx
import pytest

from catalog.domain.exceptions import ErrorKind, RemoteCatalogError
from catalog.infrastructure.config import Settings
from catalog.infrastructure.remote.shopify_client import (
    ShopifyCatalogClient,
    numeric_id,
    to_gid,
    to_product_input,
)


def _client(handler) -> tuple[ShopifyCatalogClient, list[dict]]:
    """Client whose requests are answered by *handler(payload) -> (status, body)*."""
    sent: list[dict] = []

    def respond(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        sent.append({"payload": payload, "headers": request.headers, "url": str(request.url)})
        status, body = handler(payload)
        return httpx.Response(status, json=body)

    client = ShopifyCatalogClient(
        shop_domain="demo.myshopify.com",
        access_token="shpat_test",
        api_version="2024-01",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(respond)),
    )
    return client, sent


class TestIdentifiers:

    def test_to_gid_wraps_numeric_ids(self):
        assert to_gid("Product", "123") == "gid://shopify/Product/123"
        assert to_gid("Order", 7) == "gid://shopify/Order/7"

    def test_to_gid_passes_gids_through(self):
        gid = "gid://shopify/ProductVariant/9"
        assert to_gid("ProductVariant", gid) == gid

    def test_numeric_id(self):
        assert numeric_id("gid://shopify/Product/123") == "123"
        assert numeric_id("123") == "123"

    def test_product_input_mapping(self):
        assert to_product_input(
            {"title": "Shirt", "description": "<p>Soft</p>", "productType": "Tops", "id": "x"}
        ) == {"title": "Shirt", "descriptionHtml": "<p>Soft</p>", "productType": "Tops"}


class TestTransport:

    async def test_sends_token_and_unwraps_data(self):
        client, sent = _client(lambda p: (200, {"data": {"products": {
            "edges": [{"node": {"id": "gid://shopify/Product/1", "title": "Shirt"}}],
            "pageInfo": {"hasNextPage": False, "endCursor": None},
        }}}))
        async with client:
            page = await client.list_products(first=5)

        assert page["products"] == [{"id": "gid://shopify/Product/1", "title": "Shirt"}]
        assert page["pageInfo"]["hasNextPage"] is False
        assert sent[0]["headers"]["X-Shopify-Access-Token"] == "shpat_test"
        assert sent[0]["url"] == "https://demo.myshopify.com/admin/api/2024-01/graphql.json"
        assert sent[0]["payload"]["variables"]["first"] == 5

    async def test_graphql_errors_raise(self):
        client, _ = _client(lambda p: (200, {"errors": [{"message": "Throttled"}]}))
        async with client:
            with pytest.raises(RemoteCatalogError, match="Throttled") as info:
                await client.list_orders()
        assert info.value.kind is ErrorKind.REMOTE

    async def test_http_errors_raise(self):
        client, _ = _client(lambda p: (500, {}))
        async with client:
            with pytest.raises(RemoteCatalogError, match="HTTP error: 500"):
                await client.list_draft_orders()

    async def test_transport_errors_raise(self):
        def fail(request):
            raise httpx.ConnectError("no route", request=request)

        client = ShopifyCatalogClient(
            "demo.myshopify.com",
            "t",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(fail)),
        )
        async with client:
            with pytest.raises(RemoteCatalogError, match="Request failed"):
                await client.list_orders()


class TestProducts:

    async def test_get_product_flattens_connections(self):
        client, sent = _client(lambda p: (200, {"data": {"product": {
            "id": "gid://shopify/Product/1",
            "variants": {"edges": [{"node": {"id": "v1"}}]},
            "images": {"edges": []},
        }}}))
        async with client:
            product = await client.get_product("1")
        assert product["variants"] == [{"id": "v1"}]
        assert product["images"] == []
        assert sent[0]["payload"]["variables"] == {"id": "gid://shopify/Product/1"}

    async def test_get_missing_product(self):
        client, _ = _client(lambda p: (200, {"data": {"product": None}}))
        async with client:
            assert await client.get_product("404") is None

    async def test_create_product_then_variants(self):
        def handler(payload):
            if "productCreate" in payload["query"]:
                return 200, {"data": {"productCreate": {
                    "product": {"id": "gid://shopify/Product/5", "title": "Shirt"},
                    "userErrors": [],
                }}}
            return 200, {"data": {"productVariantsBulkCreate": {
                "productVariants": [{"id": "gid://shopify/ProductVariant/8", "price": "10"}],
                "userErrors": [],
            }}}

        client, sent = _client(handler)
        async with client:
            product = await client.create_product(
                {"title": "Shirt", "variants": [{"title": "S", "price": 10}]}
            )

        assert product["variants"][0]["id"] == "gid://shopify/ProductVariant/8"
        assert sent[0]["payload"]["variables"]["input"] == {"title": "Shirt"}
        bulk = sent[1]["payload"]["variables"]
        assert bulk["productId"] == "gid://shopify/Product/5"
        assert bulk["variants"][0]["price"] == "10"
        assert bulk["variants"][0]["optionValues"] == [{"optionName": "Title", "name": "S"}]

    async def test_variant_failure_after_create_names_the_product(self):
        def handler(payload):
            if "productCreate" in payload["query"]:
                return 200, {"data": {"productCreate": {
                    "product": {"id": "gid://shopify/Product/5"}, "userErrors": [],
                }}}
            return 200, {"data": {"productVariantsBulkCreate": {
                "productVariants": None,
                "userErrors": [{"field": ["variants", "0", "price"], "message": "is invalid"}],
            }}}

        client, _ = _client(handler)
        async with client:
            with pytest.raises(RemoteCatalogError) as info:
                await client.create_product(
                    {"title": "Shirt", "variants": [{"title": "S", "price": 10}]}
                )
        assert info.value.errors == [
            "Product gid://shopify/Product/5 was created but its variants were not",
            "variants.0.price: is invalid",
        ]

    async def test_user_errors_raise(self):
        client, _ = _client(lambda p: (200, {"data": {"productUpdate": {
            "product": None,
            "userErrors": [{"field": ["title"], "message": "can't be blank"}],
        }}}))
        async with client:
            with pytest.raises(RemoteCatalogError) as info:
                await client.update_product("1", {"title": ""})
        assert info.value.errors == ["title: can't be blank"]

    async def test_delete_product(self):
        client, sent = _client(lambda p: (200, {"data": {"productDelete": {
            "deletedProductId": "gid://shopify/Product/1", "userErrors": [],
        }}}))
        async with client:
            assert await client.delete_product("1") == "gid://shopify/Product/1"
        assert sent[0]["payload"]["variables"] == {"input": {"id": "gid://shopify/Product/1"}}


class TestVariantsAndOrders:

    async def test_list_variants_filters_by_product(self):
        client, sent = _client(lambda p: (200, {"data": {"productVariants": {
            "edges": [{"node": {"id": "v1"}}], "pageInfo": {"hasNextPage": False},
        }}}))
        async with client:
            page = await client.list_variants("gid://shopify/Product/42", first=3)
        assert page["variants"] == [{"id": "v1"}]
        assert sent[0]["payload"]["variables"]["query"] == "product_id:42"

    async def test_delete_options(self):
        client, sent = _client(lambda p: (200, {"data": {"productOptionsDelete": {
            "deletedOptionsIds": ["gid://shopify/ProductOption/3"], "userErrors": [],
        }}}))
        async with client:
            deleted = await client.delete_options("1", ["3"])
        assert deleted == ["gid://shopify/ProductOption/3"]
        assert sent[0]["payload"]["variables"]["options"] == ["gid://shopify/ProductOption/3"]

    async def test_get_order_flattens_line_items(self):
        client, _ = _client(lambda p: (200, {"data": {"order": {
            "id": "gid://shopify/Order/1",
            "lineItems": {"edges": [{"node": {"title": "Shirt", "quantity": 2}}]},
        }}}))
        async with client:
            order = await client.get_order("1")
        assert order["lineItems"] == [{"title": "Shirt", "quantity": 2}]

    async def test_create_draft_order(self):
        client, _ = _client(lambda p: (200, {"data": {"draftOrderCreate": {
            "draftOrder": {"id": "gid://shopify/DraftOrder/2"}, "userErrors": [],
        }}}))
        async with client:
            draft = await client.create_draft_order({"lineItems": []})
        assert draft["id"] == "gid://shopify/DraftOrder/2"

    async def test_variants_by_ids_keeps_input_order(self):
        client, sent = _client(lambda p: (200, {"data": {"nodes": [
            {"id": "gid://shopify/ProductVariant/2"}, None, {},
        ]}}))
        async with client:
            variants = await client.get_variants_by_ids(["2", "3", "gid://shopify/ProductVariant/4"])
        assert variants == [{"id": "gid://shopify/ProductVariant/2"}, None, None]
        assert sent[0]["payload"]["variables"]["ids"] == [
            "gid://shopify/ProductVariant/2",
            "gid://shopify/ProductVariant/3",
            "gid://shopify/ProductVariant/4",
        ]

    async def test_batch_lookups_need_ids(self):
        client, sent = _client(lambda p: (200, {"data": {}}))
        async with client:
            with pytest.raises(RemoteCatalogError, match="At least one variant id"):
                await client.get_variants_by_ids([])
            with pytest.raises(RemoteCatalogError, match="At least one order id"):
                await client.get_orders_by_ids([])
        assert sent == []

    async def test_update_option(self):
        client, sent = _client(lambda p: (200, {"data": {"productOptionUpdate": {
            "product": {"id": "gid://shopify/Product/1", "options": [{"name": "Colour"}]},
            "userErrors": [],
        }}}))
        async with client:
            product = await client.update_option(
                "1",
                {"id": "7", "name": "Colour"},
                values_to_add=[{"name": "Teal"}],
                values_to_delete=["9"],
            )
        assert product["options"] == [{"name": "Colour"}]
        variables = sent[0]["payload"]["variables"]
        assert variables["productId"] == "gid://shopify/Product/1"
        assert variables["option"] == {"id": "gid://shopify/ProductOption/7", "name": "Colour"}
        assert variables["optionValuesToAdd"] == [{"name": "Teal"}]
        assert variables["optionValuesToDelete"] == ["gid://shopify/ProductOptionValue/9"]
        assert "optionValuesToUpdate" not in variables

    async def test_orders_by_ids(self):
        client, sent = _client(lambda p: (200, {"data": {"nodes": [
            {"id": "gid://shopify/Order/1", "name": "#1001"}, None,
        ]}}))
        async with client:
            orders = await client.get_orders_by_ids(["1", "2"])
        assert orders == [{"id": "gid://shopify/Order/1", "name": "#1001"}, None]
        assert "nodes(ids: $ids)" in sent[0]["payload"]["query"]

    async def test_order_metafields(self):
        client, sent = _client(lambda p: (200, {"data": {"order": {"metafields": {"edges": [
            {"node": {"namespace": "custom", "key": "gift", "value": "true"}},
        ]}}}}))
        async with client:
            metafields = await client.get_order_metafields("1", first=3)
        assert metafields == [{"namespace": "custom", "key": "gift", "value": "true"}]
        assert sent[0]["payload"]["variables"] == {"id": "gid://shopify/Order/1", "first": 3}

    async def test_metafields_of_missing_order(self):
        client, _ = _client(lambda p: (200, {"data": {"order": None}}))
        async with client:
            assert await client.get_order_metafields("404") is None

    async def test_update_order(self):
        client, sent = _client(lambda p: (200, {"data": {"orderUpdate": {
            "order": {"id": "gid://shopify/Order/1", "note": "Leave at door"},
            "userErrors": [],
        }}}))
        async with client:
            order = await client.update_order("1", {"note": "Leave at door"})
        assert order["note"] == "Leave at door"
        assert sent[0]["payload"]["variables"]["input"] == {
            "note": "Leave at door",
            "id": "gid://shopify/Order/1",
        }

    async def test_update_draft_order(self):
        client, sent = _client(lambda p: (200, {"data": {"draftOrderUpdate": {
            "draftOrder": {"id": "gid://shopify/DraftOrder/2", "email": "a@example.com"},
            "userErrors": [],
        }}}))
        async with client:
            draft = await client.update_draft_order("2", {"email": "a@example.com"})
        assert draft["email"] == "a@example.com"
        assert sent[0]["payload"]["variables"] == {
            "id": "gid://shopify/DraftOrder/2",
            "input": {"email": "a@example.com"},
        }

    async def test_update_draft_order_user_errors(self):
        client, _ = _client(lambda p: (200, {"data": {"draftOrderUpdate": {
            "draftOrder": None,
            "userErrors": [{"field": None, "message": "Draft order is completed"}],
        }}}))
        async with client:
            with pytest.raises(RemoteCatalogError, match="Draft order is completed"):
                await client.update_draft_order("2", {"note": "x"})


class TestFromSettings:

    def test_requires_domain_and_token(self):
        with pytest.raises(RemoteCatalogError, match="not configured"):
            ShopifyCatalogClient.from_settings(Settings(_env_file=None))

    async def test_builds_endpoint_from_settings(self):
        settings = Settings(
            _env_file=None,
            shopify_store_domain="demo.myshopify.com",
            shopify_access_token="t",
            shopify_api_version="2025-01",
        )
        async with ShopifyCatalogClient.from_settings(settings) as client:
            assert client.endpoint == "https://demo.myshopify.com/admin/api/2025-01/graphql.json"
