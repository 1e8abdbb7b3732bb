import hmac

from fastapi import Request

from reworkit.common.config.constants import SECRET_HEADER
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.base_exceptions import AuthorizationException


logger = get_logger(__name__)


def secret_matches(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


async def verify_secret(request: Request) -> None:
    provided = request.headers.get(SECRET_HEADER)
    expected: str = request.app.state.secret

    if provided is None or not secret_matches(provided, expected):
        client = request.client.host if request.client else "unknown"
        logger.warning(f"Rejected submission with invalid secret from {client}")
        raise AuthorizationException()
