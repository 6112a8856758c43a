"""In-memory response caching for factuursturen.

This package provides :class:`ResourceCache`, the per-client store that
keeps products (and any other collection keyed by an integer ``id``) in
memory between calls. It is consumed by
:class:`~factuursturen.client.FactuurSturenClient`; whether a given call
reads or writes it is controlled by the call's cache flag and
:attr:`~factuursturen.models.ClientConfig.allow_response_caching`.
"""

from factuursturen.cache.store import ResourceCache

__all__ = ["ResourceCache"]
