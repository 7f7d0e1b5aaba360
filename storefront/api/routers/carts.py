#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_cart_service
from storefront.api.errors import to_http
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CartView, ItemIn, QuantityIn
from storefront.services.cart_service import CartService
from storefront.services.lock_service import SessionLockTimeout

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartView)
def get_cart(svc: CartService = Depends(get_cart_service)):
    return svc.view()


@router.post("/items", response_model=CartView)
def add_item(payload: ItemIn, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.add(payload.product_id, payload.quantity)
    except (StorefrontError, SessionLockTimeout) as e:
        raise to_http(e)


@router.patch("/items/{product_id}", response_model=CartView)
def update_item(
    product_id: int,
    payload: QuantityIn,
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.update(product_id, payload.quantity)
    except (StorefrontError, SessionLockTimeout) as e:
        raise to_http(e)


@router.delete("/items/{product_id}", response_model=CartView)
def remove_item(product_id: int, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.remove(product_id)
    except (StorefrontError, SessionLockTimeout) as e:
        raise to_http(e)


@router.delete("", response_model=CartView)
def clear_cart(svc: CartService = Depends(get_cart_service)):
    try:
        return svc.clear()
    except SessionLockTimeout as e:
        raise to_http(e)
