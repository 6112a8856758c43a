"""In-memory store for resources fetched from or written to the service.

:class:`ResourceCache` holds the items of one resource collection (for
example products) for the lifetime of a client instance. It starts out
*absent* -- distinct from empty -- and comes into existence on the first
insert or wholesale replace. Items are looked up by their integer ``id``;
when the same id was appended more than once the first entry wins.

Every mutation runs under a single :class:`threading.Lock` owned by the
store. Reads take a copy under the same lock so a concurrent replace is
never observed half-done.

Nothing is persisted; the store is private to the client that owns it.

See Also:
    :class:`~factuursturen.client.FactuurSturenClient` -- decides when the
    store is read, filled, and invalidated.
"""

from __future__ import annotations

import threading
from typing import Generic, Iterable, Optional, Protocol, TypeVar


class Identified(Protocol):
    id: int


ItemT = TypeVar("ItemT", bound=Identified)


class ResourceCache(Generic[ItemT]):
    """Ordered, lazily created collection of items keyed by ``id``.

    Args:
        dedupe: When ``True``, :meth:`insert` overwrites an existing entry
            with the same id in place. The default appends, which can leave
            an older entry for the id in front of the new one.

    Example::

        cache: ResourceCache[Product] = ResourceCache()
        cache.available          # False
        cache.insert(product)
        cache.find(product.id)   # product
    """

    def __init__(self, dedupe: bool = False) -> None:
        self._dedupe = dedupe
        self._items: Optional[list[ItemT]] = None
        self._lock = threading.Lock()

    @property
    def available(self) -> bool:
        """Whether the store exists (it may still be empty)."""
        return self._items is not None

    def __len__(self) -> int:
        items = self._items
        return 0 if items is None else len(items)

    def snapshot(self) -> Optional[list[ItemT]]:
        """Return a copy of the stored items, or ``None`` if the store is absent."""
        with self._lock:
            if self._items is None:
                return None
            return list(self._items)

    def find(self, item_id: int) -> Optional[ItemT]:
        """Return the first stored item whose ``id`` equals *item_id*, else ``None``."""
        with self._lock:
            if self._items is None:
                return None
            return next((item for item in self._items if item.id == item_id), None)

    def contains(self, item_id: int) -> bool:
        return self.find(item_id) is not None

    def insert(self, item: ItemT) -> None:
        """Add *item*, creating the store if it is absent."""
        with self._lock:
            if self._items is None:
                self._items = []
            if self._dedupe:
                for index, existing in enumerate(self._items):
                    if existing.id == item.id:
                        self._items[index] = item
                        return
            self._items.append(item)

    def replace(self, items: Iterable[ItemT]) -> None:
        """Swap the whole contents for *items*, creating the store if needed."""
        fresh = list(items)
        with self._lock:
            self._items = fresh

    def remove(self, item_id: int) -> bool:
        """Remove the first entry with *item_id*.

        Returns:
            ``True`` if an entry was removed. Removing from an absent store or
            removing an id that is not stored is a no-op returning ``False``.
        """
        with self._lock:
            if self._items is None:
                return False
            for index, existing in enumerate(self._items):
                if existing.id == item_id:
                    del self._items[index]
                    return True
            return False
