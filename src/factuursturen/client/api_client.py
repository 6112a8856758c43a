"""Typed asynchronous client for the FactuurSturen API.

:class:`FactuurSturenClient` is the public entry point of the library. It
turns resource operations (list products, create a product, fetch an
invoice, ...) into requests on a :class:`~factuursturen.client.transport.Transport`
and keeps an in-memory :class:`~factuursturen.cache.ResourceCache` of
products consistent with what the service has confirmed.

Product cache rules
-------------------

Every product operation takes a tri-state flag (``allow_cache`` for reads,
``store_in_cache`` for writes). ``None`` means "use the client default",
:attr:`~factuursturen.models.ClientConfig.allow_response_caching`, which is
captured when the client is constructed.

- :meth:`~FactuurSturenClient.get_products` answers from the cache when
  caching is in effect and the cache exists. Otherwise it fetches the full
  list and, if caching is in effect *or* a cache already exists, replaces
  the cache with it so a started cache never goes stale.
- :meth:`~FactuurSturenClient.get_product` answers from the cache on an id
  hit, otherwise fetches and (caching in effect) stores the result.
- Create and update store the confirmed product; delete removes it.
- The cache is only touched after the service reported success. Failures
  propagate and leave it as it was.

Invoices are read-only here and never cached.
"""

from __future__ import annotations

from typing import Optional

import httpx

from factuursturen.cache import ResourceCache
from factuursturen.client.transport import Transport, error_detail
from factuursturen.config import resolve_config, resolve_credential
from factuursturen.exceptions import NullArgumentError, RequestFailedError, ServerError
from factuursturen.models import ClientConfig, Invoice, Product
from factuursturen.output import get_output


class FactuurSturenClient:
    """Asynchronous client for products and invoices.

    Use as an async context manager so the HTTP connection pool is opened
    and closed properly.

    Args:
        config: Connection and caching settings. Defaults to
            :class:`~factuursturen.models.ClientConfig` defaults.
        api_key: The account's API key. Without it (or without
            ``config.username``) requests are sent unauthenticated.
        transport: Optional pre-built transport, mainly for tests.

    Example::

        async with FactuurSturenClient(config, api_key="...") as client:
            product = await client.create_product(Product(name="Consult", price=95))
            same = await client.get_product(product.id)   # served from cache
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        api_key: Optional[str] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._allow_response_caching = self._config.allow_response_caching
        self._transport = transport or Transport(self._config, api_key)
        self._products: ResourceCache[Product] = ResourceCache(dedupe=self._config.dedupe_cache)

    @classmethod
    def from_config(
        cls,
        config: Optional[ClientConfig] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> FactuurSturenClient:
        """Build a client from resolved configuration, reading the API key from its source.

        Raises:
            ConfigError: If the configuration or the credential can't be resolved.
        """
        config = config or resolve_config()
        api_key = resolve_credential(config.api_key_source) if config.username else None
        return cls(config, transport=Transport(config, api_key, http_transport))

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def product_cache(self) -> ResourceCache[Product]:
        return self._products

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> FactuurSturenClient:
        self._transport.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._transport.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    # ------------------------------------------------------------------ #
    # Products
    # ------------------------------------------------------------------ #

    async def get_products(self, allow_cache: Optional[bool] = None) -> list[Product]:
        """Return all products.

        Args:
            allow_cache: Serve from the cache when it exists. ``None`` uses
                the client default.
        """
        use_cache = self._resolve_cache_flag(allow_cache)
        if use_cache:
            cached = self._products.snapshot()
            if cached is not None:
                get_output().debug(f"Product cache hit: {len(cached)} products")
                return cached

        result = await self._transport.execute("GET", "products", list[Product]) or []

        if use_cache or self._products.available:
            self._products.replace(result)
            get_output().debug(f"Product cache refreshed with {len(result)} products")
        return result

    async def get_product(
        self, product_id: int, allow_cache: Optional[bool] = None
    ) -> Optional[Product]:
        """Return one product, or ``None`` if the service does not know *product_id*.

        Args:
            product_id: The product's id.
            allow_cache: Serve from the cache on an id hit and store a fetched
                product. ``None`` uses the client default.
        """
        use_cache = self._resolve_cache_flag(allow_cache)
        if use_cache:
            cached = self._products.find(product_id)
            if cached is not None:
                get_output().debug(f"Product cache hit: {product_id}")
                return cached

        result = await self._transport.execute(
            "GET", f"products/{product_id}", Product, not_found_ok=True
        )
        if result is not None and use_cache:
            self._products.insert(result)
        return result

    async def create_product(
        self, product: Product, store_in_cache: Optional[bool] = None
    ) -> Product:
        """Create *product* upstream and set its ``id`` to the one the service assigned.

        Returns:
            The same *product* instance, now carrying its new id.

        Raises:
            NullArgumentError: If *product* is ``None``.
            RequestFailedError: If the service answers with a non-success status.
        """
        if product is None:
            raise NullArgumentError("product")
        use_cache = self._resolve_cache_flag(store_in_cache)

        response = await self._transport.send("POST", "products", json_body=_payload(product))
        if not response.is_success:
            raise RequestFailedError(response.status_code, error_detail(response))

        product.id = _parse_new_id(response)
        if use_cache:
            self._products.insert(product)
        get_output().debug(f"Created product {product.id}")
        return product

    async def update_product(
        self, product: Product, store_in_cache: Optional[bool] = None
    ) -> Product:
        """Save *product* upstream under its current ``id``.

        Raises:
            NullArgumentError: If *product* is ``None``.
            RequestFailedError: If the service answers with a non-success status.
        """
        if product is None:
            raise NullArgumentError("product")
        use_cache = self._resolve_cache_flag(store_in_cache)

        response = await self._transport.send(
            "PUT", f"products/{product.id}", json_body=_payload(product)
        )
        if not response.is_success:
            raise RequestFailedError(response.status_code, error_detail(response))

        if use_cache:
            self._products.insert(product)
        return product

    async def delete_product(self, product: Product) -> None:
        """Delete *product* upstream and drop it from the cache.

        Raises:
            NullArgumentError: If *product* is ``None``.
            RequestFailedError: If the service answers with a non-success status.
        """
        if product is None:
            raise NullArgumentError("product")
        await self.delete_product_by_id(product.id)
        self._products.remove(product.id)

    async def delete_product_by_id(self, product_id: int) -> None:
        """Delete the product with *product_id* upstream and drop it from the cache.

        Raises:
            RequestFailedError: If the service answers with a non-success status.
        """
        response = await self._transport.send("DELETE", f"products/{product_id}")
        if not response.is_success:
            raise RequestFailedError(response.status_code, error_detail(response))

        if self._products.remove(product_id):
            get_output().debug(f"Removed product {product_id} from cache")

    # ------------------------------------------------------------------ #
    # Invoices
    # ------------------------------------------------------------------ #

    async def get_invoices(self) -> list[Invoice]:
        return await self._transport.execute("GET", "invoices", list[Invoice]) or []

    async def get_invoice(self, invoice_nr: str) -> Optional[Invoice]:
        """Return one invoice by its number, or ``None`` if it does not exist."""
        return await self._transport.execute(
            "GET", f"invoices/{invoice_nr}", Invoice, not_found_ok=True
        )

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _resolve_cache_flag(self, flag: Optional[bool]) -> bool:
        return self._allow_response_caching if flag is None else flag


def _payload(product: Product) -> list[dict]:
    # The service expects the record wrapped in a one-element array.
    return [product.model_dump(mode="json", exclude_none=True)]


def _parse_new_id(response: httpx.Response) -> int:
    """Read the id the service assigned from a create response (``7``, ``"7"`` or ``{"id": 7}``)."""
    try:
        data = response.json()
    except ValueError:
        data = response.text.strip()
    if isinstance(data, dict):
        data = data.get("id")
    if isinstance(data, str) and data.strip().isdecimal():
        return int(data.strip())
    # bool is an int subclass; a JSON true is not an id.
    if isinstance(data, int) and not isinstance(data, bool):
        return data
    raise ServerError(f"Create response did not contain a product id: {response.text!r}")
