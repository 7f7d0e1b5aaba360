# storefront/api/errors.py
from fastapi import HTTPException

from storefront.domain.errors import (
    AvailabilityError,
    ConsistencyError,
    InfrastructureError,
    InsufficientStock,
    NotFoundError,
    ProductUnavailable,
    StateError,
    StorefrontError,
    ValidationError,
)
from storefront.services.lock_service import SessionLockTimeout
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

GENERIC_MESSAGE = "An error occurred while processing your request. Please try again later."


def to_http(e: Exception) -> HTTPException:
    """Mapowanie wyjatkow domeny na HTTP. Szczegoly bledow wewnetrznych tylko w logu."""
    if isinstance(e, PermissionError):
        return HTTPException(status_code=403, detail={"code": "forbidden", "message": str(e)})

    if isinstance(e, SessionLockTimeout):
        return HTTPException(status_code=409, detail={"code": "session_busy", "message": str(e)})

    if isinstance(e, (ConsistencyError, InfrastructureError)) or not isinstance(e, StorefrontError):
        logger.error(f"Internal error: {e!r}")
        return HTTPException(status_code=500, detail={"code": "internal_error", "message": GENERIC_MESSAGE})

    detail = {"code": e.code, "message": e.message}
    if isinstance(e, (ProductUnavailable, InsufficientStock)):
        detail["product_id"] = e.product_id
        detail["name"] = e.name
    if isinstance(e, InsufficientStock):
        detail["available"] = e.available

    if isinstance(e, ValidationError):
        status = 400
    elif isinstance(e, NotFoundError):
        status = 404
    elif isinstance(e, (AvailabilityError, StateError)):
        status = 409
    else:
        status = 400
    return HTTPException(status_code=status, detail=detail)
