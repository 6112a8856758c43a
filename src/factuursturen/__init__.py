"""factuursturen -- typed async client for the FactuurSturen invoicing API.

The library maps the service's products and invoices onto Pydantic models
and keeps an in-memory cache of products per client instance, so repeated
reads don't hit the network and writes keep the cache consistent.

Typical use::

    from factuursturen import ClientConfig, FactuurSturenClient, Product

    config = ClientConfig(username="me")
    async with FactuurSturenClient(config, api_key="...") as client:
        products = await client.get_products()

A small ``factuursturen`` command line ships with the package for quick
inspection from a shell.

Modules:
    client: :class:`FactuurSturenClient` and the HTTP transport.
    cache: The in-memory :class:`~factuursturen.cache.ResourceCache`.
    models: Pydantic models for configuration and API resources.
    config: Config file, environment and credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr discipline and the debug trail.
"""

__version__ = "0.1.0"

from factuursturen.client import FactuurSturenClient
from factuursturen.exceptions import (
    FactuurSturenError,
    NullArgumentError,
    RequestFailedError,
)
from factuursturen.models import ClientConfig, Invoice, Product

__all__ = [
    "ClientConfig",
    "FactuurSturenClient",
    "FactuurSturenError",
    "Invoice",
    "NullArgumentError",
    "Product",
    "RequestFailedError",
    "__version__",
]
