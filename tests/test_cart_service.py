from decimal import Decimal

import pytest

from storefront.domain.errors import ItemNotFound
from storefront.services.cart_service import CartService
from storefront.services.catalog_reader import CatalogReader


@pytest.fixture()
def service(cart, db):
    return CartService(cart, CatalogReader(db))


def test_empty_cart_view(service):
    view = service.view()
    assert view.items == []
    assert view.total_items == 0
    assert view.total_price == Decimal("0.00")
    assert view.is_empty


def test_view_uses_catalog_prices(service, make_product):
    make_product(101, price="10.00", name="Whole Milk (1L)")
    make_product(205, price="15.50", name="Cheddar (200g)")

    service.add(101, 3)
    view = service.add(205, 1)

    assert view.total_items == 4
    assert view.total_price == Decimal("45.50")
    assert not view.is_empty
    assert [(l.product_id, l.name, l.quantity, l.total_price) for l in view.items] == [
        (101, "Whole Milk (1L)", 3, Decimal("30.00")),
        (205, "Cheddar (200g)", 1, Decimal("15.50")),
    ]


def test_update_to_zero_drops_line_from_totals(service, make_product):
    make_product(101, price="10.00")
    make_product(205, price="2.50")
    service.add(101, 2)
    service.add(205, 4)

    view = service.update(101, 0)

    assert [l.product_id for l in view.items] == [205]
    assert view.total_items == 4
    assert view.total_price == Decimal("10.00")


def test_change_applies_delta(service, make_product):
    make_product(101, price="1.25")
    service.add(101, 5)

    view = service.change(101, -2)

    assert view.items[0].quantity == 3
    assert view.total_price == Decimal("3.75")


def test_price_change_is_visible_in_next_view(service, make_product, db):
    from storefront.data.models import ProductModel

    make_product(101, price="10.00")
    service.add(101, 1)

    db.get(ProductModel, 101).price = Decimal("11.00")
    db.commit()

    assert service.view().total_price == Decimal("11.00")


def test_product_missing_from_catalog_is_skipped(service, make_product):
    make_product(101, price="10.00")
    service.add(101, 1)
    view = service.add(999, 2)

    assert [l.product_id for l in view.items] == [101]
    assert view.total_items == 1
    # wpis w koszyku zostaje, checkout go odrzuci
    assert service.store.items() == {101: 1, 999: 2}


def test_remove_and_clear(service, make_product):
    make_product(101)
    make_product(205)
    service.add(101, 1)
    service.add(205, 1)

    assert [l.product_id for l in service.remove(101).items] == [205]
    with pytest.raises(ItemNotFound):
        service.remove(101)
    assert service.clear().is_empty
