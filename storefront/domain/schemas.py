# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


def money(value) -> Decimal:
    return Decimal(value).quantize(Decimal("0.01"))


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InventoryEvent(str, Enum):
    ORDER = "order"
    RESTOCK = "restock"
    ADJUSTMENT = "adjustment"
    LOW_STOCK = "low_stock"


# =====================================================
# CORE VALUE TYPES
# =====================================================
class SessionContext(BaseModel):
    """Kontekst sesji przekazywany jawnie przez callera (zamiast globali)."""

    session_id: str = Field(..., min_length=1)
    user_id: int | None = None

    model_config = ConfigDict(frozen=True)


class LineItem(BaseModel):
    """Jedna pozycja koszyka / zamowienia: (product_id, quantity)."""

    product_id: int
    quantity: int

    model_config = ConfigDict(frozen=True)


class ProductSnapshot(BaseModel):
    """Stan produktu odczytany z katalogu w chwili zapytania."""

    product_id: int
    exists: bool
    is_active: bool = False
    name: str | None = None
    price: Decimal | None = None
    stock_quantity: int = 0

    model_config = ConfigDict(frozen=True)


class PlacedOrder(BaseModel):
    order_id: int
    total: Decimal


class ReconcileReport(BaseModel):
    product_id: int
    initial_stock: int
    delta_sum: int
    stock_quantity: int
    last_after: int | None
    consistent: bool


# =====================================================
# CART
# =====================================================
class CartLineOut(BaseModel):
    product_id: int
    name: str
    price: Decimal
    quantity: int
    total_price: Decimal


class CartView(BaseModel):
    items: List[CartLineOut]
    total_items: int
    total_price: Decimal
    is_empty: bool


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class QuantityIn(BaseModel):
    """Nowa calkowita ilosc pozycji (0 usuwa pozycje)."""

    quantity: int = Field(..., ge=0)


# =====================================================
# ORDERS
# =====================================================
class CheckoutIn(BaseModel):
    shipping_address: str = Field(..., min_length=1, max_length=500)
    payment_method: str = Field(..., min_length=1, max_length=50)
    notes: str | None = Field(None, max_length=2000)


class StatusChangeIn(BaseModel):
    status: str
    notes: str | None = None


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    order_date: datetime
    total_amount: Decimal
    status: str
    shipping_address: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class OrderSummaryOut(BaseModel):
    id: int
    order_date: datetime
    total_amount: Decimal
    status: str

    model_config = ConfigDict(from_attributes=True)


class OrderHistoryOut(BaseModel):
    order_id: int
    status: str
    user_id: int | None = None
    notes: str | None = None
    change_date: datetime

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# INVENTORY
# =====================================================
class RestockIn(BaseModel):
    quantity: int = Field(..., gt=0)
    description: str | None = None


class AdjustIn(BaseModel):
    delta: int
    description: str | None = None


class InventoryLogOut(BaseModel):
    product_id: int
    event_type: str
    quantity: int
    before_quantity: int
    after_quantity: int
    order_id: int | None = None
    user_id: int | None = None
    low_stock_threshold: int | None = None
    description: str | None = None
    log_date: datetime

    model_config = ConfigDict(from_attributes=True)


class LowStockOut(BaseModel):
    product_id: int
    name: str
    stock_quantity: int
    low_stock_threshold: int
