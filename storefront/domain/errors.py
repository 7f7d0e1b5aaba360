# storefront/domain/errors.py
"""
Wyjatki domenowe silnika zamowien.

Warstwa serwisow rzuca je przy naruszeniu regul biznesowych,
routery (api) tlumacza je na kody HTTP.
"""


class StorefrontError(Exception):
    """Baza dla wszystkich bledow domeny."""

    code = "storefront_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# -- ValidationError: zle dane wejsciowe, bez retry ----------------------

class ValidationError(StorefrontError):
    code = "validation_error"


class InvalidQuantity(ValidationError):
    code = "invalid_quantity"

    def __init__(self, quantity, message: str | None = None):
        super().__init__(message or f"Quantity must be a positive integer, got {quantity!r}.")
        self.quantity = quantity


class InvalidStatus(ValidationError):
    code = "invalid_status"

    def __init__(self, status):
        super().__init__(f"Unknown order status {status!r}.")
        self.status = status


class InvalidAdjustment(ValidationError):
    code = "invalid_adjustment"


# -- NotFoundError ------------------------------------------------------

class NotFoundError(StorefrontError):
    code = "not_found"


class UserNotFound(NotFoundError):
    code = "user_not_found"

    def __init__(self, user_id: int):
        super().__init__("User not found.")
        self.user_id = user_id


class ProductNotFound(NotFoundError):
    code = "product_not_found"

    def __init__(self, product_id: int):
        super().__init__(f"Product ID {product_id} not found.")
        self.product_id = product_id


class OrderNotFound(NotFoundError):
    code = "order_not_found"

    def __init__(self, order_id: int):
        super().__init__(f"Order #{order_id} not found.")
        self.order_id = order_id


class ItemNotFound(NotFoundError):
    code = "item_not_found"

    def __init__(self, product_id: int):
        super().__init__(f"Product ID {product_id} is not in the cart.")
        self.product_id = product_id


# -- AvailabilityError: odrzucenie biznesowe, mozna pokazac klientowi ----

class AvailabilityError(StorefrontError):
    code = "availability_error"


class ProductUnavailable(AvailabilityError):
    code = "product_unavailable"

    def __init__(self, product_id: int, name: str):
        super().__init__(f'Product "{name}" is not available for purchase.')
        self.product_id = product_id
        self.name = name


class InsufficientStock(AvailabilityError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, name: str, available: int, requested: int | None = None):
        super().__init__(f'Not enough stock for "{name}". Available: {available}')
        self.product_id = product_id
        self.name = name
        self.available = available
        self.requested = requested


# -- StateError -----------------------------------------------------------

class StateError(StorefrontError):
    code = "state_error"


class EmptyOrder(StateError):
    code = "empty_order"

    def __init__(self):
        super().__init__("No items in order.")


class InvalidTransition(StateError):
    code = "invalid_transition"

    def __init__(self, order_id: int, current: str, requested: str):
        super().__init__(f"Order #{order_id} cannot move from {current} to {requested}.")
        self.order_id = order_id
        self.current = current
        self.requested = requested


# -- ConsistencyError: blad w kodzie, nie powinien wystapic ----------------

class ConsistencyError(StorefrontError):
    code = "consistency_error"


class NegativeStock(ConsistencyError):
    code = "negative_stock"

    def __init__(self, product_id: int, before: int, delta: int):
        super().__init__(
            f"Stock of product {product_id} would drop below zero ({before} {delta:+d})."
        )
        self.product_id = product_id
        self.before = before
        self.delta = delta


# -- InfrastructureError: baza/polaczenie, caller moze ponowic -----------

class InfrastructureError(StorefrontError):
    code = "infrastructure_error"
