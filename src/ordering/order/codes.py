"""Order codes — ``ORDER-`` followed by a random 10-character alphanumeric token."""

import secrets
import string

import structlog
from shared.errors import OrderCodeUnavailable
from shared.settings import ORDER_CODE_LENGTH, ORDER_CODE_PREFIX, order_code_max_attempts

logger = structlog.get_logger(__name__)

_ALPHABET = string.ascii_letters + string.digits


def random_token(length=ORDER_CODE_LENGTH) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_order_code(is_taken, token_factory=random_token, attempts=None) -> str:
    """Return a code for which ``is_taken(code)`` is false.

    Gives up with ``OrderCodeUnavailable`` after ``attempts`` collisions
    (``ORDER_CODE_MAX_ATTEMPTS``, default 5).
    """
    attempts = attempts or order_code_max_attempts()
    for attempt in range(1, attempts + 1):
        code = ORDER_CODE_PREFIX + token_factory()
        if not is_taken(code):
            return code
        logger.warning("Order code collision", order_code=code, attempt=attempt)
    raise OrderCodeUnavailable(attempts)
