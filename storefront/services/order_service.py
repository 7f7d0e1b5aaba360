# storefront/services/order_service.py
from typing import List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_history import OrderHistoryModel
from storefront.domain.errors import OrderNotFound
from storefront.domain.schemas import OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.services.order_status import OrderStatusHistory
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Serwis zapytan o zamowienia + anulowanie przez klienta.
    Tworzenie zamowien jest w OrderPlacer, zmiany statusu w OrderStatusHistory.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.status = OrderStatusHistory(db)

    def get_order(self, order_id: int, user_id: int | None = None) -> OrderModel:
        """
        Use Case: Pobranie zamowienia z pozycjami (Query).
        user_id=None - odczyt administracyjny bez sprawdzania wlasciciela.
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFound(order_id)

        if user_id is not None and order.user_id != user_id:
            raise PermissionError("Access to this order is denied")

        return order

    def list_orders(self, user_id: int) -> List[OrderModel]:
        return self.repo.get_orders_by_user(user_id)

    def history(self, order_id: int) -> List[OrderHistoryModel]:
        self.get_order(order_id)
        return self.repo.get_history(order_id)

    def cancel_order(self, order_id: int, user_id: int, notes: str | None = None) -> OrderModel:
        """
        Use Case: Anulowanie przez klienta.
        Klient moze anulowac tylko zamowienie w statusie pending.
        """
        self.get_order(order_id, user_id)
        self.status.transition(
            order_id,
            OrderStatus.CANCELLED,
            actor_user_id=user_id,
            notes=notes or "Cancelled by customer",
            allowed_from=frozenset({OrderStatus.PENDING}),
        )
        return self.get_order(order_id, user_id)
