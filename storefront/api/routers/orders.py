# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from storefront.api.deps import get_cart_store
from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    CheckoutIn,
    OrderHistoryOut,
    OrderOut,
    OrderSummaryOut,
    PlacedOrder,
    StatusChangeIn,
)
from storefront.services.cart_store import CartStore
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import SessionLockTimeout
from storefront.services.order_placer import OrderPlacer
from storefront.services.order_service import OrderService
from storefront.services.order_status import OrderStatusHistory
from storefront.utils.retry import db_retry

router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@db_retry()
def _checkout(svc: CheckoutService, payload: CheckoutIn) -> PlacedOrder:
    return svc.checkout(
        shipping_address=payload.shipping_address,
        payment_method=payload.payment_method,
        notes=payload.notes,
    )


@router.post("/checkout", response_model=PlacedOrder, status_code=201)
def checkout(
    payload: CheckoutIn,
    store: CartStore = Depends(get_cart_store),
    db: Session = Depends(get_db),
):
    """
    Tworzy zamowienie z koszyka sesji.
    Bledy infrastruktury sa ponawiane z backoffem, biznesowe od razu wracaja.
    """
    svc = CheckoutService(store, OrderPlacer(db))
    try:
        return _checkout(svc, payload)
    except (StorefrontError, SessionLockTimeout) as e:
        raise to_http(e)


@router.get("", response_model=List[OrderSummaryOut])
def list_orders(x_user_id: int = Header(...), db: Session = Depends(get_db)):
    return [OrderSummaryOut.model_validate(o) for o in OrderService(db).list_orders(x_user_id)]


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, x_user_id: int = Header(...), db: Session = Depends(get_db)):
    try:
        return OrderOut.model_validate(OrderService(db).get_order(order_id, x_user_id))
    except (StorefrontError, PermissionError) as e:
        raise to_http(e)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(order_id: int, x_user_id: int = Header(...), db: Session = Depends(get_db)):
    try:
        return OrderOut.model_validate(OrderService(db).cancel_order(order_id, x_user_id))
    except (StorefrontError, PermissionError) as e:
        raise to_http(e)


@admin_router.post("/{order_id}/status", response_model=OrderOut)
def change_status(
    order_id: int,
    payload: StatusChangeIn,
    x_user_id: int | None = Header(None),
    db: Session = Depends(get_db),
):
    try:
        OrderStatusHistory(db).transition(order_id, payload.status, x_user_id, payload.notes)
        return OrderOut.model_validate(OrderService(db).get_order(order_id))
    except StorefrontError as e:
        raise to_http(e)


@admin_router.get("/{order_id}/history", response_model=List[OrderHistoryOut])
def order_history(order_id: int, db: Session = Depends(get_db)):
    try:
        return [OrderHistoryOut.model_validate(h) for h in OrderService(db).history(order_id)]
    except StorefrontError as e:
        raise to_http(e)
