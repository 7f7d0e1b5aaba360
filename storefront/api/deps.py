# storefront/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import SessionContext
from storefront.repos.cart_repo import CartRepo, build_cart_repo
from storefront.services.cart_service import CartService
from storefront.services.cart_store import CartStore
from storefront.services.catalog_reader import CatalogReader


@lru_cache
def get_cart_repo() -> CartRepo:
    return build_cart_repo()


def get_session_ctx(
    x_session_id: str = Header(..., min_length=1),
    x_user_id: int | None = Header(None),
) -> SessionContext:
    # sesja i uwierzytelnienie sa po stronie callera, tu dostajemy gotowy kontekst
    return SessionContext(session_id=x_session_id, user_id=x_user_id)


def get_cart_store(
    ctx: SessionContext = Depends(get_session_ctx),
    repo: CartRepo = Depends(get_cart_repo),
) -> CartStore:
    return CartStore(repo, ctx)


def get_cart_service(
    store: CartStore = Depends(get_cart_store),
    db: Session = Depends(get_db),
) -> CartService:
    return CartService(store, CatalogReader(db))
