# storefront/services/order_status.py
from typing import Dict, FrozenSet

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order_history import OrderHistoryModel
from storefront.domain.errors import (
    InfrastructureError,
    InvalidStatus,
    InvalidTransition,
    OrderNotFound,
    StorefrontError,
)
from storefront.domain.schemas import OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# pending -> processing -> completed, anulowanie z pending i processing
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def parse_status(status: OrderStatus | str) -> OrderStatus:
    try:
        return OrderStatus(status)
    except ValueError:
        raise InvalidStatus(status) from None


def is_terminal(status: OrderStatus | str) -> bool:
    return not TRANSITIONS[OrderStatus(status)]


def can_transition(current: OrderStatus | str, new: OrderStatus | str) -> bool:
    return OrderStatus(new) in TRANSITIONS[OrderStatus(current)]


class OrderStatusHistory:
    """
    Maszyna stanow zamowienia. Kazda faktyczna zmiana statusu zapisuje
    dokladnie jeden wiersz order_history; zmiana na ten sam status to no-op.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    def transition(
        self,
        order_id: int,
        new_status: OrderStatus | str,
        actor_user_id: int | None = None,
        notes: str | None = None,
        allowed_from: FrozenSet[OrderStatus] | None = None,
    ) -> bool:
        """
        Zwraca True gdy status sie zmienil, False dla no-op.
        allowed_from dodatkowo zaweza stany zrodlowe (np. klient anuluje tylko pending).
        """
        target = parse_status(new_status)
        try:
            changed = self._transition(order_id, target, actor_user_id, notes, allowed_from)
            self.repo.commit()
        except StorefrontError:
            self.repo.rollback()
            raise
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Status change of order {order_id} failed: {e}", exc_info=True)
            raise InfrastructureError("An error occurred while updating the order status.") from e
        return changed

    def _transition(
        self,
        order_id: int,
        target: OrderStatus,
        actor_user_id: int | None,
        notes: str | None,
        allowed_from: FrozenSet[OrderStatus] | None,
    ) -> bool:
        order = self.repo.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        current = OrderStatus(order.status)
        if current is target:
            logger.info(f"Order {order_id} already {current.value}, nothing to do")
            return False

        if not can_transition(current, target) or (
            allowed_from is not None and current not in allowed_from
        ):
            logger.warning(
                f"Rejected status change of order {order_id}: {current.value} -> {target.value}"
            )
            raise InvalidTransition(order_id, current.value, target.value)

        order.status = target.value
        message = f"Status changed from {current.value} to {target.value}"
        if notes:
            message = f"{message}: {notes}"

        self.repo.add_history(
            OrderHistoryModel(
                order_id=order_id,
                status=target.value,
                user_id=actor_user_id,
                notes=message,
            )
        )
        logger.info(f"Order {order_id}: {current.value} -> {target.value} (by user {actor_user_id})")
        return True
