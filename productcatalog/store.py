from __future__ import annotations

from collections.abc import Iterable

from .models import Product


class CatalogStore:
    """Immutable product catalog.

    Built once from the loaded products and shared read-only between request
    handlers; there is no write path, so concurrent readers need no locking.
    """

    def __init__(self, products: Iterable[Product]) -> None:
        self._products: tuple[Product, ...] = tuple(products)

    def __len__(self) -> int:
        return len(self._products)

    def list_all(self) -> tuple[Product, ...]:
        return self._products

    def find_by_id(self, product_id: str) -> Product | None:
        # Duplicate ids are not expected; the first one in catalog order wins.
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    def search(self, query: str) -> list[Product]:
        """Case-insensitive substring match on name or description.

        An empty query is a substring of everything and returns the whole catalog.
        """
        q = query.lower()
        return [p for p in self._products if q in p.name.lower() or q in p.description.lower()]
