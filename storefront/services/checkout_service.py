# storefront/services/checkout_service.py
from redis.exceptions import RedisError

from storefront.domain.errors import UserNotFound
from storefront.domain.schemas import PlacedOrder
from storefront.services.cart_store import CartStore
from storefront.services.lock_service import SessionLockTimeout
from storefront.services.order_placer import OrderPlacer
from storefront.utils.logging import add_context, clear_context, get_logger
from storefront.utils.settings import DB_STATEMENT_TIMEOUT_MS, SESSION_LOCK_TTL_SECONDS

logger = get_logger(__name__)


def checkout_lock_ttl(lines: int) -> float:
    """
    Gorne ograniczenie czasu transakcji checkoutu: user, insert zamowienia
    i commit + na kazda linie lock produktu, pozycja i wpis w ledgerze.
    Kazde zapytanie (z czekaniem na row lock) ucina statement_timeout.
    """
    statements = 3 + 3 * lines
    return SESSION_LOCK_TTL_SECONDS + statements * DB_STATEMENT_TIMEOUT_MS / 1000


class CheckoutService:
    """
    Use Case: checkout koszyka sesji.

    1. snapshot koszyka (pod lockiem sesji - podwojny submit czeka)
    2. przedluzenie locka na caly czas transakcji
    3. OrderPlacer.place - jedna transakcja
    4. sukces -> czyszczenie koszyka, porazka -> koszyk zostaje
    """

    def __init__(self, store: CartStore, placer: OrderPlacer):
        self.store = store
        self.placer = placer

    def checkout(
        self,
        shipping_address: str | None = None,
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> PlacedOrder:
        user_id = self.store.ctx.user_id
        if user_id is None:
            raise UserNotFound(user_id)

        add_context(session_id=self.store.session_id, user_id=user_id)
        try:
            with self.store.lock() as held:
                items = self.store.snapshot()
                if not held.extend(checkout_lock_ttl(len(items))):
                    raise SessionLockTimeout(f"Session {self.store.session_id} lock lost before checkout")

                placed = self.placer.place(
                    user_id,
                    items,
                    shipping_address=shipping_address,
                    payment_method=payment_method,
                    notes=notes,
                )
                self._clear_cart(placed)
        finally:
            clear_context()

        return placed

    def _clear_cart(self, placed: PlacedOrder) -> None:
        # zamowienie jest juz zapisane - blad czyszczenia nie moze go cofnac ani ukryc
        try:
            self.store.clear()
        except RedisError as e:
            logger.error(
                f"Order {placed.order_id} placed but cart {self.store.session_id} not cleared: {e}",
                exc_info=True,
            )
            return
        logger.info(f"Session {self.store.session_id}: order {placed.order_id} placed, cart cleared")
