import os

# modulowy engine nie moze wymagac postgresa w testach
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CART_BACKEND"] = "memory"

from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from storefront.data.database import Base, make_engine
from storefront.data.models import ProductModel, UserModel
from storefront.domain.schemas import SessionContext
from storefront.repos.cart_repo import MemoryCartRepo
from storefront.services.cart_store import CartStore


@pytest.fixture()
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def user_id(db):
    db.add(UserModel(id=1, name="Alice", email="alice@example.com"))
    db.add(UserModel(id=2, name="Bob", email="bob@example.com"))
    db.commit()
    return 1


@pytest.fixture()
def make_product(db):
    """Dodaje produkt i zwraca jego id (bez dotykania wygaslych atrybutow)."""

    def _make(product_id, price="10.00", stock=10, name=None, is_active=True, threshold=0):
        db.add(
            ProductModel(
                id=product_id,
                name=name or f"Product {product_id}",
                price=Decimal(price),
                stock_quantity=stock,
                low_stock_threshold=threshold,
                is_active=is_active,
            )
        )
        db.commit()
        return product_id

    return _make


@pytest.fixture()
def cart_repo():
    return MemoryCartRepo()


@pytest.fixture()
def cart(cart_repo):
    return CartStore(cart_repo, SessionContext(session_id="sess-001", user_id=1))
