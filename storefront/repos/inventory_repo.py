# storefront/repos/inventory_repo.py
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.data.models.inventory_log import InventoryLogModel


class InventoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def append(self, entry: InventoryLogModel) -> InventoryLogModel:
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_entries(self, product_id: int) -> List[InventoryLogModel]:
        stmt = (
            select(InventoryLogModel)
            .where(InventoryLogModel.product_id == product_id)
            .order_by(InventoryLogModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def delta_sum(self, product_id: int) -> int:
        stmt = select(func.coalesce(func.sum(InventoryLogModel.quantity), 0)).where(
            InventoryLogModel.product_id == product_id
        )
        return int(self.db.execute(stmt).scalar_one())
