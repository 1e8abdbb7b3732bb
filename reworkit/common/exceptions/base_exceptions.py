from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ErrorCode(str, Enum):
    UNKNOWN = "E0000"

    EXTERNAL_TOOL_ERROR = "E1000"
    SYNC_FAILED = "E1001"
    ENVIRONMENT_UPDATE_FAILED = "E1002"
    BUILD_LAUNCH_FAILED = "E1003"

    CODEC_ERROR = "E2000"
    COMPRESSION_FAILED = "E2001"
    DECOMPRESSION_FAILED = "E2002"

    STORAGE_ERROR = "E3000"
    STORAGE_CONNECTION_ERROR = "E3001"
    STORAGE_NOT_FOUND = "E3002"
    STORAGE_BLOB_WRITE_ERROR = "E3003"

    AUTHORIZATION_ERROR = "E6001"

    VALIDATION_ERROR = "E7000"
    MISSING_REQUIRED_FIELD = "E7002"

    TRANSPORT_ERROR = "E8000"
    COLLECTOR_REJECTED = "E8001"


class ReworkitBaseException(Exception):
    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code}, "
            f"details={self.details})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "exception_type": self.__class__.__name__,
        }

    def with_context(self, **kwargs: Any) -> "ReworkitBaseException":
        self.details.update(kwargs)
        return self


class RetryableException(ReworkitBaseException):
    """An error the worker may retry, such as a lost connection or a store outage."""


class NonRetryableException(ReworkitBaseException):
    """An error that will fail again if repeated unchanged."""


class ValidationException(NonRetryableException):
    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if field_name:
            details["field_name"] = field_name
        super().__init__(
            message=message,
            error_code=ErrorCode.MISSING_REQUIRED_FIELD if field_name else ErrorCode.VALIDATION_ERROR,
            details=details,
        )
        self.field_name = field_name

    @classmethod
    def missing_field(cls, field_name: str) -> "ValidationException":
        return cls(message=f"Missing {field_name} field", field_name=field_name)

    @classmethod
    def empty_field(cls, field_name: str) -> "ValidationException":
        return cls(message=f"Empty {field_name} field", field_name=field_name)


class AuthorizationException(NonRetryableException):
    def __init__(
        self,
        message: str = "Invalid secret token",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTHORIZATION_ERROR,
            details=details,
        )
