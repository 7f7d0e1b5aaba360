# storefront/repos/product_repo.py
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_many(self, product_ids: Iterable[int]) -> List[ProductModel]:
        ids = sorted(set(product_ids))
        if not ids:
            return []
        stmt = (
            select(ProductModel)
            .where(ProductModel.id.in_(ids))
            .order_by(ProductModel.id)
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_for_update(self, product_id: int) -> ProductModel | None:
        #SELECT ... FOR UPDATE, blokada wiersza do konca transakcji
        stmt = (
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_low_stock(self, threshold: int | None = None) -> List[ProductModel]:
        limit = ProductModel.low_stock_threshold if threshold is None else threshold
        stmt = (
            select(ProductModel)
            .where(ProductModel.is_active.is_(True), ProductModel.stock_quantity <= limit)
            .order_by(ProductModel.stock_quantity, ProductModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())
