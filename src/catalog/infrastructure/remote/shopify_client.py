"""Shopify Admin GraphQL implementation of RemoteCatalogProvider.

Thin pass-through: every method sends one GraphQL document and unwraps
the interesting part of the response. Top-level ``errors`` and mutation
``userErrors`` are raised as RemoteCatalogError; so are HTTP and transport
failures. No retries are attempted.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from catalog.domain.exceptions import RemoteCatalogError
from catalog.domain.repository.remote_catalog import RemoteCatalogProvider
from catalog.infrastructure.config import Settings
from catalog.infrastructure.logging import get_logger

logger = get_logger(__name__)

GID_PREFIX = "gid://shopify/"


def to_gid(kind: str, entity_id: str | int) -> str:
    """Normalize ``"123"`` to ``"gid://shopify/<kind>/123"``; GIDs pass through."""
    entity_id = str(entity_id)
    if entity_id.startswith(GID_PREFIX):
        return entity_id
    return f"{GID_PREFIX}{kind}/{entity_id}"


def numeric_id(gid: str) -> str:
    """The trailing numeric part of a GID."""
    return gid.rsplit("/", 1)[-1]


def to_product_input(data: dict[str, Any]) -> dict[str, Any]:
    """Map catalog-style product fields onto Shopify's ProductInput."""
    mapping = {
        "title": "title",
        "description": "descriptionHtml",
        "vendor": "vendor",
        "productType": "productType",
        "tags": "tags",
        "status": "status",
    }
    return {target: data[source] for source, target in mapping.items() if source in data}


def _edges(connection: dict[str, Any] | None) -> list[dict[str, Any]]:
    if not connection:
        return []
    return [edge["node"] for edge in connection.get("edges", [])]


PRODUCT_SUMMARY_FIELDS = """
    id
    title
    handle
    status
    vendor
    productType
    tags
    totalInventory
    createdAt
    updatedAt
"""

VARIANT_FIELDS = """
    id
    title
    price
    compareAtPrice
    sku
    barcode
    inventoryQuantity
    taxable
"""

LIST_PRODUCTS = f"""
query ListProducts($first: Int!, $after: String) {{
    products(first: $first, after: $after) {{
        edges {{ node {{ {PRODUCT_SUMMARY_FIELDS} }} }}
        pageInfo {{ hasNextPage endCursor }}
    }}
}}
"""

GET_PRODUCT = f"""
query GetProduct($id: ID!) {{
    product(id: $id) {{
        {PRODUCT_SUMMARY_FIELDS}
        descriptionHtml
        options {{ id name values }}
        variants(first: 100) {{ edges {{ node {{ {VARIANT_FIELDS} }} }} }}
        images(first: 50) {{ edges {{ node {{ id url altText width height }} }} }}
    }}
}}
"""

CREATE_PRODUCT = f"""
mutation ProductCreate($input: ProductInput!) {{
    productCreate(input: $input) {{
        product {{ {PRODUCT_SUMMARY_FIELDS} }}
        userErrors {{ field message }}
    }}
}}
"""

UPDATE_PRODUCT = f"""
mutation ProductUpdate($input: ProductInput!) {{
    productUpdate(input: $input) {{
        product {{ {PRODUCT_SUMMARY_FIELDS} }}
        userErrors {{ field message }}
    }}
}}
"""

DELETE_PRODUCT = """
mutation ProductDelete($input: ProductDeleteInput!) {
    productDelete(input: $input) {
        deletedProductId
        userErrors { field message }
    }
}
"""

GET_VARIANT = f"""
query GetProductVariant($id: ID!) {{
    productVariant(id: $id) {{
        {VARIANT_FIELDS}
        product {{ id title }}
    }}
}}
"""

LIST_VARIANTS = f"""
query ProductVariantsList($first: Int!, $after: String, $query: String) {{
    productVariants(first: $first, after: $after, query: $query) {{
        edges {{ node {{ {VARIANT_FIELDS} }} }}
        pageInfo {{ hasNextPage endCursor }}
    }}
}}
"""


GET_VARIANTS_BY_IDS = f"""
query ProductVariantsByIds($ids: [ID!]!) {{
    nodes(ids: $ids) {{
        ... on ProductVariant {{
            {VARIANT_FIELDS}
            product {{ id title }}
        }}
    }}
}}
"""

CREATE_VARIANTS = f"""
mutation ProductVariantsCreate($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {{
    productVariantsBulkCreate(productId: $productId, variants: $variants) {{
        productVariants {{ {VARIANT_FIELDS} }}
        userErrors {{ field message }}
    }}
}}
"""

CREATE_OPTIONS = """
mutation CreateOptions($productId: ID!, $options: [OptionCreateInput!]!) {
    productOptionsCreate(productId: $productId, options: $options) {
        product { id options { id name position values } }
        userErrors { field message }
    }
}
"""

DELETE_OPTIONS = """
mutation DeleteOptions($productId: ID!, $options: [ID!]!) {
    productOptionsDelete(productId: $productId, options: $options) {
        deletedOptionsIds
        userErrors { field message }
    }
}
"""

UPDATE_OPTION = """
mutation UpdateOption(
    $productId: ID!,
    $option: OptionUpdateInput!,
    $optionValuesToAdd: [OptionValueCreateInput!],
    $optionValuesToUpdate: [OptionValueUpdateInput!],
    $optionValuesToDelete: [ID!]
) {
    productOptionUpdate(
        productId: $productId,
        option: $option,
        optionValuesToAdd: $optionValuesToAdd,
        optionValuesToUpdate: $optionValuesToUpdate,
        optionValuesToDelete: $optionValuesToDelete
    ) {
        product {
            id
            options { id name position values optionValues { id name hasVariants } }
        }
        userErrors { field message }
    }
}
"""

ORDER_FIELDS = """
    id
    name
    createdAt
    displayFinancialStatus
    displayFulfillmentStatus
    totalPriceSet { shopMoney { amount currencyCode } }
    customer { id displayName email }
"""

LIST_ORDERS = f"""
query ListOrders($first: Int!) {{
    orders(first: $first, reverse: true) {{
        edges {{ node {{ {ORDER_FIELDS} }} }}
    }}
}}
"""

GET_ORDER = f"""
query GetOrder($id: ID!) {{
    order(id: $id) {{
        {ORDER_FIELDS}
        lineItems(first: 100) {{
            edges {{ node {{ id title quantity sku variant {{ id }} }} }}
        }}
    }}
}}
"""

DELETE_ORDER = """
mutation OrderDelete($orderId: ID!) {
    orderDelete(orderId: $orderId) {
        deletedId
        userErrors { field message }
    }
}
"""

GET_ORDERS_BY_IDS = f"""
query OrdersByIds($ids: [ID!]!) {{
    nodes(ids: $ids) {{
        ... on Order {{ {ORDER_FIELDS} }}
    }}
}}
"""

GET_ORDER_METAFIELDS = """
query OrderMetafields($id: ID!, $first: Int!) {
    order(id: $id) {
        metafields(first: $first) {
            edges { node { namespace key value } }
        }
    }
}
"""

UPDATE_ORDER = """
mutation OrderUpdate($input: OrderInput!) {
    orderUpdate(input: $input) {
        order {
            id
            note
            tags
            email
            shippingAddress { address1 city province zip country }
        }
        userErrors { field message }
    }
}
"""

DRAFT_ORDER_FIELDS = """
    id
    name
    status
    createdAt
    invoiceUrl
    totalPriceSet { shopMoney { amount currencyCode } }
"""

LIST_DRAFT_ORDERS = f"""
query DraftOrders($first: Int!) {{
    draftOrders(first: $first, reverse: true) {{
        edges {{ node {{ {DRAFT_ORDER_FIELDS} }} }}
    }}
}}
"""

CREATE_DRAFT_ORDER = f"""
mutation DraftOrderCreate($input: DraftOrderInput!) {{
    draftOrderCreate(input: $input) {{
        draftOrder {{ {DRAFT_ORDER_FIELDS} }}
        userErrors {{ field message }}
    }}
}}
"""

UPDATE_DRAFT_ORDER = f"""
mutation DraftOrderUpdate($id: ID!, $input: DraftOrderInput!) {{
    draftOrderUpdate(id: $id, input: $input) {{
        draftOrder {{ {DRAFT_ORDER_FIELDS} note2 email }}
        userErrors {{ field message }}
    }}
}}
"""

DELETE_DRAFT_ORDER = """
mutation DraftOrderDelete($input: DraftOrderDeleteInput!) {
    draftOrderDelete(input: $input) {
        deletedId
        userErrors { field message }
    }
}
"""


class ShopifyCatalogClient(RemoteCatalogProvider):
    """
    Async Shopify Admin GraphQL client.

    Usage:
        async with ShopifyCatalogClient.from_settings(settings) as client:
            page = await client.list_products(first=20)
    """

    GRAPHQL_ENDPOINT = "https://{domain}/admin/api/{version}/graphql.json"

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = "2024-01",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.shop_domain = shop_domain
        self.endpoint = self.GRAPHQL_ENDPOINT.format(domain=shop_domain, version=api_version)
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": access_token,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> ShopifyCatalogClient:
        if not settings.remote_configured:
            raise RemoteCatalogError(
                "Remote catalog is not configured: set CATALOG_SHOPIFY_STORE_DOMAIN "
                "and CATALOG_SHOPIFY_ACCESS_TOKEN"
            )
        return cls(
            shop_domain=settings.shopify_store_domain,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> ShopifyCatalogClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Transport ------------------------------------------------------------

    async def execute(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Send one GraphQL document and return its ``data`` object."""
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = await self._client.post(self.endpoint, json=payload, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "shopify_http_error",
                status=e.response.status_code,
                shop=self.shop_domain,
            )
            raise RemoteCatalogError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("shopify_request_failed", error=str(e), shop=self.shop_domain)
            raise RemoteCatalogError(f"Request failed: {e}") from e

        data = response.json()
        if data.get("errors"):
            logger.error("shopify_graphql_errors", errors=data["errors"], shop=self.shop_domain)
            raise RemoteCatalogError([err.get("message", str(err)) for err in data["errors"]])
        return data.get("data") or {}

    async def _mutate(self, query: str, variables: dict[str, Any], root: str) -> dict[str, Any]:
        """Run a mutation and raise its ``userErrors``, if any."""
        result = (await self.execute(query, variables)).get(root) or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            logger.warning("shopify_user_errors", mutation=root, errors=user_errors)
            raise RemoteCatalogError(
                [
                    f"{'.'.join(e['field'])}: {e['message']}" if e.get("field") else e["message"]
                    for e in user_errors
                ]
            )
        return result

    # --- Products -------------------------------------------------------------

    async def list_products(self, first: int = 10, after: str | None = None) -> dict[str, Any]:
        data = await self.execute(LIST_PRODUCTS, {"first": first, "after": after})
        connection = data.get("products") or {}
        return {"products": _edges(connection), "pageInfo": connection.get("pageInfo", {})}

    async def get_product(self, product_id: str) -> dict[str, Any] | None:
        data = await self.execute(GET_PRODUCT, {"id": to_gid("Product", product_id)})
        product = data.get("product")
        if product is None:
            return None
        product["variants"] = _edges(product.get("variants"))
        product["images"] = _edges(product.get("images"))
        return product

    async def create_product(self, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._mutate(
            CREATE_PRODUCT, {"input": to_product_input(data)}, "productCreate"
        )
        product = result["product"]
        variants = data.get("variants") or []
        # productCreate only makes the default variant; the rest are bulk-created.
        if variants:
            try:
                product["variants"] = await self.create_variants(product["id"], variants)
            except RemoteCatalogError as exc:
                logger.error(
                    "shopify_product_variants_failed", product_id=product["id"], errors=exc.errors
                )
                raise RemoteCatalogError(
                    [f"Product {product['id']} was created but its variants were not", *exc.errors]
                ) from exc
        logger.info("shopify_product_created", product_id=product["id"])
        return product

    async def update_product(self, product_id: str, data: dict[str, Any]) -> dict[str, Any]:
        product_input = {"id": to_gid("Product", product_id), **to_product_input(data)}
        result = await self._mutate(UPDATE_PRODUCT, {"input": product_input}, "productUpdate")
        return result["product"]

    async def delete_product(self, product_id: str) -> str:
        result = await self._mutate(
            DELETE_PRODUCT, {"input": {"id": to_gid("Product", product_id)}}, "productDelete"
        )
        return result["deletedProductId"]

    # --- Variants & options ---------------------------------------------------

    async def get_variant(self, variant_id: str) -> dict[str, Any] | None:
        data = await self.execute(GET_VARIANT, {"id": to_gid("ProductVariant", variant_id)})
        return data.get("productVariant")

    async def get_variants_by_ids(self, variant_ids: list[str]) -> list[dict[str, Any] | None]:
        if not variant_ids:
            raise RemoteCatalogError("At least one variant id is required")
        ids = [to_gid("ProductVariant", v) for v in variant_ids]
        nodes = (await self.execute(GET_VARIANTS_BY_IDS, {"ids": ids})).get("nodes") or []
        return [node or None for node in nodes]

    async def list_variants(
        self, product_id: str, first: int = 10, after: str | None = None
    ) -> dict[str, Any]:
        variables = {
            "first": first,
            "after": after,
            "query": f"product_id:{numeric_id(str(product_id))}",
        }
        connection = (await self.execute(LIST_VARIANTS, variables)).get("productVariants") or {}
        return {"variants": _edges(connection), "pageInfo": connection.get("pageInfo", {})}

    async def create_variants(
        self, product_id: str, variants: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        bulk_input = []
        for v in variants:
            item: dict[str, Any] = {"price": str(v["price"])}
            if v.get("compareAtPrice") is not None:
                item["compareAtPrice"] = str(v["compareAtPrice"])
            if v.get("barcode"):
                item["barcode"] = v["barcode"]
            if "taxable" in v:
                item["taxable"] = v["taxable"]
            if v.get("title"):
                item["optionValues"] = [{"optionName": "Title", "name": v["title"]}]
            bulk_input.append(item)

        result = await self._mutate(
            CREATE_VARIANTS,
            {"productId": to_gid("Product", product_id), "variants": bulk_input},
            "productVariantsBulkCreate",
        )
        return result.get("productVariants") or []

    async def create_options(
        self, product_id: str, options: list[dict[str, Any]]
    ) -> dict[str, Any]:
        option_input = [
            {"name": o["name"], "values": [{"name": value} for value in o.get("values", [])]}
            for o in options
        ]
        result = await self._mutate(
            CREATE_OPTIONS,
            {"productId": to_gid("Product", product_id), "options": option_input},
            "productOptionsCreate",
        )
        return result["product"]

    async def delete_options(self, product_id: str, option_ids: list[str]) -> list[str]:
        result = await self._mutate(
            DELETE_OPTIONS,
            {
                "productId": to_gid("Product", product_id),
                "options": [to_gid("ProductOption", o) for o in option_ids],
            },
            "productOptionsDelete",
        )
        return result.get("deletedOptionsIds") or []

    async def update_option(
        self,
        product_id: str,
        option: dict[str, Any],
        values_to_add: list[dict[str, Any]] | None = None,
        values_to_update: list[dict[str, Any]] | None = None,
        values_to_delete: list[str] | None = None,
    ) -> dict[str, Any]:
        option_input = {**option, "id": to_gid("ProductOption", option["id"])}
        variables: dict[str, Any] = {
            "productId": to_gid("Product", product_id),
            "option": option_input,
        }
        if values_to_add:
            variables["optionValuesToAdd"] = values_to_add
        if values_to_update:
            variables["optionValuesToUpdate"] = values_to_update
        if values_to_delete:
            variables["optionValuesToDelete"] = [
                to_gid("ProductOptionValue", v) for v in values_to_delete
            ]
        result = await self._mutate(UPDATE_OPTION, variables, "productOptionUpdate")
        return result["product"]

    # --- Orders ---------------------------------------------------------------

    async def list_orders(self, first: int = 10) -> list[dict[str, Any]]:
        return _edges((await self.execute(LIST_ORDERS, {"first": first})).get("orders"))

    async def get_order(self, order_id: str) -> dict[str, Any] | None:
        order = (await self.execute(GET_ORDER, {"id": to_gid("Order", order_id)})).get("order")
        if order is None:
            return None
        order["lineItems"] = _edges(order.get("lineItems"))
        return order

    async def delete_order(self, order_id: str) -> str:
        result = await self._mutate(
            DELETE_ORDER, {"orderId": to_gid("Order", order_id)}, "orderDelete"
        )
        return result["deletedId"]

    async def get_orders_by_ids(self, order_ids: list[str]) -> list[dict[str, Any] | None]:
        if not order_ids:
            raise RemoteCatalogError("At least one order id is required")
        ids = [to_gid("Order", o) for o in order_ids]
        nodes = (await self.execute(GET_ORDERS_BY_IDS, {"ids": ids})).get("nodes") or []
        return [node or None for node in nodes]

    async def get_order_metafields(
        self, order_id: str, first: int = 10
    ) -> list[dict[str, Any]] | None:
        data = await self.execute(
            GET_ORDER_METAFIELDS, {"id": to_gid("Order", order_id), "first": first}
        )
        order = data.get("order")
        if order is None:
            return None
        return _edges(order.get("metafields"))

    async def update_order(self, order_id: str, data: dict[str, Any]) -> dict[str, Any]:
        order_input = {**data, "id": to_gid("Order", order_id)}
        result = await self._mutate(UPDATE_ORDER, {"input": order_input}, "orderUpdate")
        return result["order"]

    # --- Draft orders ---------------------------------------------------------

    async def list_draft_orders(self, first: int = 10) -> list[dict[str, Any]]:
        return _edges((await self.execute(LIST_DRAFT_ORDERS, {"first": first})).get("draftOrders"))

    async def create_draft_order(self, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._mutate(CREATE_DRAFT_ORDER, {"input": data}, "draftOrderCreate")
        logger.info("shopify_draft_order_created", draft_order_id=result["draftOrder"]["id"])
        return result["draftOrder"]

    async def update_draft_order(self, draft_order_id: str, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._mutate(
            UPDATE_DRAFT_ORDER,
            {"id": to_gid("DraftOrder", draft_order_id), "input": data},
            "draftOrderUpdate",
        )
        return result["draftOrder"]

    async def delete_draft_order(self, draft_order_id: str) -> str:
        result = await self._mutate(
            DELETE_DRAFT_ORDER,
            {"input": {"id": to_gid("DraftOrder", draft_order_id)}},
            "draftOrderDelete",
        )
        return result["deletedId"]
