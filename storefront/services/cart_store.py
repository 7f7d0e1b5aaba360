# storefront/services/cart_store.py
from typing import Dict, Tuple

from storefront.domain.errors import InvalidQuantity, ItemNotFound
from storefront.domain.schemas import LineItem, SessionContext
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _is_int(value) -> bool:
    # bool dziedziczy po int, ale True nie jest iloscia
    return isinstance(value, int) and not isinstance(value, bool)


class CartStore:
    """
    Koszyk jednej sesji: product_id -> ilosc (zawsze >= 1).

    Nie zna katalogu - ceny i nazwy sa rozwiazywane osobno.
    Kazda modyfikacja to jeden read-modify-write pod lockiem sesji,
    wiec podwojny submit nie gubi aktualizacji.
    """

    def __init__(self, repo: CartRepo, ctx: SessionContext):
        self.repo = repo
        self.ctx = ctx

    @property
    def session_id(self) -> str:
        return self.ctx.session_id

    def lock(self):
        return self.repo.lock(self.session_id)

    #query
    def items(self) -> Dict[int, int]:
        return self.repo.load(self.session_id)

    def total_items(self) -> int:
        return sum(self.items().values())

    def snapshot(self) -> Tuple[LineItem, ...]:
        cart = self.items()
        return tuple(
            LineItem(product_id=pid, quantity=qty) for pid, qty in sorted(cart.items())
        )

    #commands
    def add(self, product_id: int, qty: int) -> Dict[int, int]:
        if not _is_int(qty) or qty <= 0:
            raise InvalidQuantity(qty)

        with self.lock():
            cart = self.repo.load(self.session_id)
            cart[product_id] = cart.get(product_id, 0) + qty
            self.repo.save(self.session_id, cart)

        logger.info(f"Cart {self.session_id}: +{qty} of product {product_id} -> {cart[product_id]}")
        return cart

    def set_delta(self, product_id: int, delta: int) -> Dict[int, int]:
        if not _is_int(delta):
            raise InvalidQuantity(delta, f"Quantity change must be an integer, got {delta!r}.")

        with self.lock():
            cart = self.repo.load(self.session_id)
            if product_id not in cart:
                raise ItemNotFound(product_id)

            new_qty = cart[product_id] + delta
            if new_qty <= 0:
                del cart[product_id]
            else:
                cart[product_id] = new_qty
            self.repo.save(self.session_id, cart)

        logger.info(f"Cart {self.session_id}: product {product_id} {delta:+d} -> {max(new_qty, 0)}")
        return cart

    def set_quantity(self, product_id: int, qty: int) -> Dict[int, int]:
        """Klient wysyla nowa calkowita ilosc; zamieniamy ja na delte."""
        if not _is_int(qty) or qty < 0:
            raise InvalidQuantity(qty, f"Quantity must be zero or a positive integer, got {qty!r}.")

        with self.lock():
            current = self.repo.load(self.session_id).get(product_id)
            if current is None:
                raise ItemNotFound(product_id)
            return self.set_delta(product_id, qty - current)

    def remove(self, product_id: int) -> Dict[int, int]:
        with self.lock():
            cart = self.repo.load(self.session_id)
            if product_id not in cart:
                raise ItemNotFound(product_id)
            del cart[product_id]
            self.repo.save(self.session_id, cart)

        logger.info(f"Cart {self.session_id}: removed product {product_id}")
        return cart

    def clear(self) -> None:
        with self.lock():
            self.repo.delete(self.session_id)
        logger.info(f"Cart {self.session_id} cleared")
