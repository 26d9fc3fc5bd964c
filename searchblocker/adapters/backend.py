"""Downstream search backend — the step an allowed search proceeds to.

Adapters never search themselves: once a term is allowed they hand the
original query to a ``SearchBackend``. The application installs one on
``app.state.search_backend``; ``InMemorySearchBackend`` is the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, runtime_checkable


@dataclass(frozen=True)
class Product:
    sku: str
    name: str


@runtime_checkable
class SearchBackend(Protocol):
    async def search(self, query: str) -> list[Product]:
        """Return products matching ``query``. Empty query returns nothing."""
        ...


class InMemorySearchBackend:
    """Case-insensitive substring search over a fixed product list."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products = list(products)

    async def search(self, query: str) -> list[Product]:
        needle = query.strip().lower()
        if not needle:
            return []
        return [p for p in self._products if needle in p.name.lower() or needle == p.sku.lower()]
