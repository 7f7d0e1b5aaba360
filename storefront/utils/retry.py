# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import redis

from storefront.domain.errors import InfrastructureError
from storefront.utils.settings import CHECKOUT_RETRY_ATTEMPTS


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def db_retry(attempts: int = CHECKOUT_RETRY_ATTEMPTS):
    # polityka callera: transakcja po bledzie infrastruktury jest w calosci wycofana,
    # wiec ponowienie jest bezpieczne. Bledy biznesowe nie sa ponawiane.
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(InfrastructureError),
    )
