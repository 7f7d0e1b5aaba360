# storefront/repos/order_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.order_history import OrderHistoryModel


class OrderRepo:
    """Repo nie commituje - transakcja nalezy do serwisu."""

    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        return item

    def get_order(self, order_id: int) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items))
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_for_update(self, order_id: int) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_orders_by_user(self, user_id: int) -> List[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.order_date.desc(), OrderModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def add_history(self, entry: OrderHistoryModel) -> OrderHistoryModel:
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_history(self, order_id: int) -> List[OrderHistoryModel]:
        stmt = (
            select(OrderHistoryModel)
            .where(OrderHistoryModel.order_id == order_id)
            .order_by(OrderHistoryModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
