from __future__ import annotations

from collections.abc import Iterable

from app.promohub.db.models import ProductRef


class ProductCatalog:
    """Product details used to enrich promotion product references.

    Stands in for the tenant's product table; promotions only ever store ids
    until a catalog entry for that id is known.
    """

    def __init__(self) -> None:
        self._products: dict[str, ProductRef] = {}

    def upsert(self, products: Iterable[ProductRef]) -> list[ProductRef]:
        stored = []
        for product in products:
            self._products[product.id] = product
            stored.append(product)
        return stored

    def get(self, product_id: str) -> ProductRef | None:
        return self._products.get(product_id)

    def list(self) -> list[ProductRef]:
        return sorted(self._products.values(), key=lambda product: product.id)

    def enrich(self, refs: Iterable[ProductRef]) -> list[ProductRef]:
        return [self._products.get(ref.id, ref) for ref in refs]

    def clear(self) -> None:
        self._products.clear()
