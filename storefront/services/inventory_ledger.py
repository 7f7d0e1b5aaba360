# storefront/services/inventory_ledger.py
from typing import List

from sqlalchemy.orm import Session

from storefront.data.models.inventory_log import InventoryLogModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import InvalidAdjustment, NegativeStock
from storefront.domain.schemas import InventoryEvent
from storefront.repos.inventory_repo import InventoryRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    """
    Append-only ledger stanow magazynowych + licznik stock_quantity.

    Nie otwiera wlasnej transakcji - pracuje w transakcji callera
    (flush, nigdy commit). Caller musi trzymac blokade wiersza produktu.

    Niezmiennik: after_quantity ostatniego wpisu == products.stock_quantity,
    a suma delt od pierwszego wpisu == stock - before_quantity pierwszego wpisu.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = InventoryRepo(db)

    def apply(
        self,
        product: ProductModel,
        delta: int,
        event_type: InventoryEvent | str,
        order_id: int | None = None,
        user_id: int | None = None,
        description: str | None = None,
    ) -> List[InventoryLogModel]:
        try:
            event_type = InventoryEvent(event_type)
        except ValueError:
            raise InvalidAdjustment(f"Unknown inventory event {event_type!r}.") from None
        self._validate(product, delta, event_type)

        before = product.stock_quantity
        after = before + delta

        product.stock_quantity = after
        entry = self.repo.append(
            InventoryLogModel(
                product_id=product.id,
                event_type=event_type.value,
                quantity=delta,
                before_quantity=before,
                after_quantity=after,
                order_id=order_id,
                user_id=user_id,
                description=description,
            )
        )
        entries = [entry]

        #przejscie przez prog niskiego stanu -> znacznik low_stock (delta 0)
        threshold = product.low_stock_threshold
        if delta < 0 and threshold is not None and before > threshold >= after:
            entries.append(self._low_stock_marker(product, after, threshold, order_id, user_id))

        return entries

    def _validate(self, product: ProductModel, delta: int, event_type: InventoryEvent) -> None:
        after = product.stock_quantity + delta

        if event_type is InventoryEvent.ORDER:
            if delta >= 0:
                raise InvalidAdjustment(f"Order events must decrease the stock, got {delta:+d}.")
            if after < 0:
                #nie powinno sie zdarzyc jesli checkout sprawdzil stan pod tym samym lockiem
                logger.error(
                    f"Negative stock for product {product.id}: "
                    f"{product.stock_quantity} {delta:+d}"
                )
                raise NegativeStock(product.id, product.stock_quantity, delta)
            return

        if event_type is InventoryEvent.RESTOCK and delta <= 0:
            raise InvalidAdjustment(f"Restock quantity must be positive, got {delta}.")
        if event_type is InventoryEvent.ADJUSTMENT and delta == 0:
            raise InvalidAdjustment("Adjustment must change the stock.")
        if event_type is InventoryEvent.LOW_STOCK and delta != 0:
            raise InvalidAdjustment("Low stock markers do not change the stock.")
        if after < 0:
            raise InvalidAdjustment(
                f"Stock of product {product.id} cannot go below zero "
                f"(current {product.stock_quantity}, change {delta:+d})."
            )

    def _low_stock_marker(
        self,
        product: ProductModel,
        stock: int,
        threshold: int,
        order_id: int | None,
        user_id: int | None,
    ) -> InventoryLogModel:
        logger.warning(f'Product {product.id} "{product.name}" is low on stock: {stock} left')
        return self.repo.append(
            InventoryLogModel(
                product_id=product.id,
                event_type=InventoryEvent.LOW_STOCK.value,
                quantity=0,
                before_quantity=stock,
                after_quantity=stock,
                order_id=order_id,
                user_id=user_id,
                low_stock_threshold=threshold,
                description=f'Low stock: {stock} units of "{product.name}" left (threshold {threshold})',
            )
        )
