# storefront/services/order_placer.py
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    EmptyOrder,
    InfrastructureError,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
    ProductUnavailable,
    StorefrontError,
    UserNotFound,
)
from storefront.domain.schemas import InventoryEvent, LineItem, OrderStatus, PlacedOrder, money
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.catalog_reader import CatalogReader
from storefront.services.inventory_ledger import InventoryLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _merge_lines(items: Iterable[LineItem]) -> List[Tuple[int, int]]:
    """Scala duplikaty i sortuje rosnaco po product_id (stala kolejnosc lockow)."""
    merged: Dict[int, int] = {}
    for line in items:
        qty = line.quantity
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise InvalidQuantity(qty)
        merged[line.product_id] = merged.get(line.product_id, 0) + qty
    return sorted(merged.items())


class OrderPlacer:
    """
    Zamiana snapshotu koszyka w zamowienie - jedna transakcja.

    Albo zapisane jest wszystko (zamowienie, pozycje, zmniejszone stany,
    wpisy w ledgerze), albo nic. Produkty sa blokowane (FOR UPDATE)
    w kolejnosci rosnacego id, wiec rownolegle checkouty nie zakleszcza sie.
    Ceny pochodza z zablokowanego odczytu, nie z koszyka.
    Silnik niczego nie ponawia - to polityka callera.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepo(db)
        self.orders = OrderRepo(db)
        self.catalog = CatalogReader(db)
        self.ledger = InventoryLedger(db)

    def place(
        self,
        user_id: int,
        items: Iterable[LineItem],
        shipping_address: str | None = None,
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> PlacedOrder:
        try:
            placed = self._place(user_id, list(items), shipping_address, payment_method, notes)
            self.orders.commit()
        except StorefrontError as e:
            self.orders.rollback()
            logger.warning(f"Checkout rejected for user {user_id}: {e.message}")
            raise
        except SQLAlchemyError as e:
            self.orders.rollback()
            logger.error(f"Checkout failed for user {user_id}: {e}", exc_info=True)
            raise InfrastructureError("An error occurred while processing the order.") from e

        logger.info(f"Order {placed.order_id} placed by user {user_id}, total {placed.total}")
        return placed

    def _place(
        self,
        user_id: int,
        items: List[LineItem],
        shipping_address: str | None,
        payment_method: str | None,
        notes: str | None,
    ) -> PlacedOrder:
        #1. user
        if not self.users.exists(user_id):
            raise UserNotFound(user_id)

        #2. pusty koszyk
        if not items:
            raise EmptyOrder()
        lines = _merge_lines(items)

        #3. walidacja pod blokada, po kolei rosnaco po id
        locked: List[Tuple[ProductModel, int, Decimal]] = []
        total = Decimal("0.00")
        for product_id, qty in lines:
            product = self.catalog.lock(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            if not product.is_active:
                raise ProductUnavailable(product_id, product.name)
            if product.stock_quantity < qty:
                raise InsufficientStock(product_id, product.name, product.stock_quantity, qty)

            price = money(product.price)
            total += price * qty
            locked.append((product, qty, price))

        #4. zapis zamowienia, pozycji i ruchow magazynowych
        order = self.orders.add_order(
            OrderModel(
                user_id=user_id,
                total_amount=money(total),
                status=OrderStatus.PENDING.value,
                shipping_address=shipping_address,
                payment_method=payment_method,
                notes=notes,
            )
        )

        for product, qty, price in locked:
            self.orders.add_item(
                OrderItemModel(
                    order_id=order.id,
                    product_id=product.id,
                    quantity=qty,
                    price=price,
                )
            )
            self.ledger.apply(
                product,
                -qty,
                InventoryEvent.ORDER,
                order_id=order.id,
                user_id=user_id,
                description=f'Order #{order.id}: {qty} units of "{product.name}" purchased',
            )

        return PlacedOrder(order_id=order.id, total=money(total))
