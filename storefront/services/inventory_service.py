# storefront/services/inventory_service.py
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.inventory_log import InventoryLogModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import InfrastructureError, ProductNotFound, StorefrontError
from storefront.domain.schemas import InventoryEvent, ReconcileReport
from storefront.repos.inventory_repo import InventoryRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.inventory_ledger import InventoryLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryService:
    """Operacje administracyjne na stanach - kazda we wlasnej transakcji."""

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepo(db)
        self.logs = InventoryRepo(db)
        self.ledger = InventoryLedger(db)

    #commands
    def restock(
        self,
        product_id: int,
        quantity: int,
        user_id: int | None = None,
        description: str | None = None,
    ) -> List[InventoryLogModel]:
        return self._apply(
            product_id,
            quantity,
            InventoryEvent.RESTOCK,
            user_id,
            description or f"Restocked {quantity} units",
        )

    def adjust(
        self,
        product_id: int,
        delta: int,
        user_id: int | None = None,
        description: str | None = None,
    ) -> List[InventoryLogModel]:
        return self._apply(
            product_id,
            delta,
            InventoryEvent.ADJUSTMENT,
            user_id,
            description or f"Manual adjustment {delta:+d}",
        )

    def _apply(
        self,
        product_id: int,
        delta: int,
        event_type: InventoryEvent,
        user_id: int | None,
        description: str,
    ) -> List[InventoryLogModel]:
        try:
            product = self.products.get_for_update(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            entries = self.ledger.apply(
                product, delta, event_type, user_id=user_id, description=description
            )
            self.db.commit()
        except StorefrontError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Inventory {event_type.value} of product {product_id} failed: {e}", exc_info=True)
            raise InfrastructureError("An error occurred while updating the stock.") from e

        logger.info(f"Product {product_id}: {event_type.value} {delta:+d}, stock now {entries[0].after_quantity}")
        return entries

    #query
    def ledger_entries(self, product_id: int) -> List[InventoryLogModel]:
        self._get_product(product_id)
        return self.logs.get_entries(product_id)

    def reconcile(self, product_id: int) -> ReconcileReport:
        """
        Odtworzenie stanu z ledgera: before pierwszego wpisu + suma delt
        musi rownac sie stock_quantity, tak samo after ostatniego wpisu.
        """
        product = self._get_product(product_id)
        entries = self.logs.get_entries(product_id)
        stock = product.stock_quantity

        if not entries:
            return ReconcileReport(
                product_id=product_id,
                initial_stock=stock,
                delta_sum=0,
                stock_quantity=stock,
                last_after=None,
                consistent=True,
            )

        initial = entries[0].before_quantity
        delta_sum = self.logs.delta_sum(product_id)
        last_after = entries[-1].after_quantity
        consistent = initial + delta_sum == stock and last_after == stock
        if not consistent:
            logger.error(
                f"Ledger of product {product_id} out of sync: initial {initial}, "
                f"deltas {delta_sum:+d}, last after {last_after}, stock {stock}"
            )

        return ReconcileReport(
            product_id=product_id,
            initial_stock=initial,
            delta_sum=delta_sum,
            stock_quantity=stock,
            last_after=last_after,
            consistent=consistent,
        )

    def low_stock(self, threshold: int | None = None) -> List[ProductModel]:
        """Aktywne produkty ze stanem <= threshold (None = prog produktu)."""
        return self.products.get_low_stock(threshold)

    def _get_product(self, product_id: int) -> ProductModel:
        product = self.products.get_many([product_id])
        if not product:
            raise ProductNotFound(product_id)
        return product[0]
