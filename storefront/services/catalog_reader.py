# storefront/services/catalog_reader.py
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.schemas import ProductSnapshot
from storefront.repos.product_repo import ProductRepo


def to_snapshot(product: ProductModel) -> ProductSnapshot:
    return ProductSnapshot(
        product_id=product.id,
        exists=True,
        is_active=bool(product.is_active),
        name=product.name,
        price=product.price,
        stock_quantity=product.stock_quantity,
    )


class CatalogReader:
    """
    Odczyt katalogu: cena, aktywnosc, stan.
    Zawsze swiezy odczyt z bazy (bez cache), bo checkout polega na nim
    wewnatrz wlasnej transakcji.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def lookup(self, product_ids: Iterable[int]) -> Dict[int, ProductSnapshot]:
        ids = list(product_ids)
        found = {p.id: to_snapshot(p) for p in self.repo.get_many(ids)}
        return {
            pid: found.get(pid, ProductSnapshot(product_id=pid, exists=False))
            for pid in ids
        }

    def lock(self, product_id: int) -> ProductModel | None:
        """Wiersz produktu z blokada do konca transakcji callera."""
        return self.repo.get_for_update(product_id)
