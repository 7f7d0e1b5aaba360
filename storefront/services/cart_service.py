# storefront/services/cart_service.py
from decimal import Decimal
from typing import Dict

from storefront.domain.schemas import CartLineOut, CartView, money
from storefront.services.cart_store import CartStore
from storefront.services.catalog_reader import CatalogReader
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Prosta implementacja cqrs dla koszyka
    commands (add, update, remove, clear) modyfikuja CartStore
    query (view) dokleja dane z katalogu i liczy sumy

    Ceny w widoku sa tylko do wyswietlenia - checkout i tak czyta je
    ponownie pod blokada.
    """

    def __init__(self, store: CartStore, catalog: CatalogReader):
        self.store = store
        self.catalog = catalog

    #query - odczyt
    def view(self) -> CartView:
        return self._render(self.store.items())

    #commands
    def add(self, product_id: int, quantity: int) -> CartView:
        return self._render(self.store.add(product_id, quantity))

    def update(self, product_id: int, quantity: int) -> CartView:
        return self._render(self.store.set_quantity(product_id, quantity))

    def change(self, product_id: int, delta: int) -> CartView:
        return self._render(self.store.set_delta(product_id, delta))

    def remove(self, product_id: int) -> CartView:
        return self._render(self.store.remove(product_id))

    def clear(self) -> CartView:
        self.store.clear()
        return self._render({})

    def _render(self, cart: Dict[int, int]) -> CartView:
        products = self.catalog.lookup(sorted(cart))

        lines = []
        total_price = Decimal("0.00")
        total_items = 0
        for product_id, quantity in sorted(cart.items()):
            product = products[product_id]
            if not product.exists:
                #produkt zniknal z katalogu - pomijamy, checkout i tak go odrzuci
                logger.warning(
                    f"Product {product_id} found in cart {self.store.session_id} but not in catalog"
                )
                continue

            line_total = money(product.price * quantity)
            total_price += line_total
            total_items += quantity
            lines.append(
                CartLineOut(
                    product_id=product_id,
                    name=product.name,
                    price=money(product.price),
                    quantity=quantity,
                    total_price=line_total,
                )
            )

        return CartView(
            items=lines,
            total_items=total_items,
            total_price=money(total_price),
            is_empty=total_items == 0,
        )
