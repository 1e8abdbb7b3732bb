from reworkit.common.exceptions.base_exceptions import (
    ReworkitBaseException,
    ErrorCode,
    RetryableException,
    NonRetryableException,
    ValidationException,
    AuthorizationException,
)
from reworkit.common.exceptions.build_exceptions import (
    ExternalToolException,
    CodecException,
)
from reworkit.common.exceptions.storage_exceptions import (
    StoreException,
    StoreConnectionError,
    PackageNotFoundError,
    BlobWriteException,
)
from reworkit.common.exceptions.transport_exceptions import TransportException

__all__ = [
    "ReworkitBaseException",
    "ErrorCode",
    "RetryableException",
    "NonRetryableException",
    "ValidationException",
    "AuthorizationException",
    "ExternalToolException",
    "CodecException",
    "StoreException",
    "StoreConnectionError",
    "PackageNotFoundError",
    "BlobWriteException",
    "TransportException",
]
