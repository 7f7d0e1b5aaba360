#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.product import ProductModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.inventory_log import InventoryLogModel
from storefront.data.models.order_history import OrderHistoryModel

__all__ = [
    "UserModel",
    "ProductModel",
    "OrderModel",
    "OrderItemModel",
    "InventoryLogModel",
    "OrderHistoryModel",
]
