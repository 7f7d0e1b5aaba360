# storefront/api/routers/inventory.py
from typing import List

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import AdjustIn, InventoryLogOut, LowStockOut, ReconcileReport, RestockIn
from storefront.services.inventory_service import InventoryService

router = APIRouter(prefix="/admin/inventory", tags=["admin"])


@router.get("/low-stock", response_model=List[LowStockOut])
def low_stock(threshold: int | None = Query(None, ge=0), db: Session = Depends(get_db)):
    # bez parametru kazdy produkt porownywany z wlasnym progiem
    products = InventoryService(db).low_stock(threshold)
    return [
        LowStockOut(
            product_id=p.id,
            name=p.name,
            stock_quantity=p.stock_quantity,
            low_stock_threshold=p.low_stock_threshold,
        )
        for p in products
    ]


@router.post("/{product_id}/restock", response_model=List[InventoryLogOut])
def restock(
    product_id: int,
    payload: RestockIn,
    x_user_id: int | None = Header(None),
    db: Session = Depends(get_db),
):
    try:
        entries = InventoryService(db).restock(product_id, payload.quantity, x_user_id, payload.description)
        return [InventoryLogOut.model_validate(e) for e in entries]
    except StorefrontError as e:
        raise to_http(e)


@router.post("/{product_id}/adjust", response_model=List[InventoryLogOut])
def adjust(
    product_id: int,
    payload: AdjustIn,
    x_user_id: int | None = Header(None),
    db: Session = Depends(get_db),
):
    try:
        entries = InventoryService(db).adjust(product_id, payload.delta, x_user_id, payload.description)
        return [InventoryLogOut.model_validate(e) for e in entries]
    except StorefrontError as e:
        raise to_http(e)


@router.get("/{product_id}/ledger", response_model=List[InventoryLogOut])
def ledger(product_id: int, db: Session = Depends(get_db)):
    try:
        return [InventoryLogOut.model_validate(e) for e in InventoryService(db).ledger_entries(product_id)]
    except StorefrontError as e:
        raise to_http(e)


@router.get("/{product_id}/reconcile", response_model=ReconcileReport)
def reconcile(product_id: int, db: Session = Depends(get_db)):
    try:
        return InventoryService(db).reconcile(product_id)
    except StorefrontError as e:
        raise to_http(e)
