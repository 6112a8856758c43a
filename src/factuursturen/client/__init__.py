"""HTTP client module for factuursturen.

Classes:
    :class:`FactuurSturenClient` -- typed operations on products and
    invoices, with an in-memory product cache.
    :class:`Transport` -- one request/response exchange over
    :class:`httpx.AsyncClient` with auth, retry and error mapping.

Example::

    from factuursturen.client import FactuurSturenClient

    async with FactuurSturenClient.from_config() as client:
        products = await client.get_products()
"""

from factuursturen.client.api_client import FactuurSturenClient
from factuursturen.client.transport import Transport

__all__ = ["FactuurSturenClient", "Transport"]
