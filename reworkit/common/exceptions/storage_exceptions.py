from typing import Optional, Dict, Any

from reworkit.common.exceptions.base_exceptions import (
    RetryableException,
    NonRetryableException,
    ErrorCode,
)


class StoreException(RetryableException):
    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        backend: Optional[str] = None,
        package: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.STORAGE_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if operation:
            details["operation"] = operation
        if backend:
            details["backend"] = backend
        if package:
            details["package"] = package
        super().__init__(message, error_code, details, cause)
        self.operation = operation
        self.backend = backend
        self.package = package


class StoreConnectionError(StoreException):
    def __init__(
        self,
        message: str,
        backend: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            operation="connect",
            backend=backend,
            error_code=ErrorCode.STORAGE_CONNECTION_ERROR,
            cause=cause,
        )


class PackageNotFoundError(NonRetryableException):
    http_status = 404

    def __init__(
        self,
        name: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["package"] = name
        super().__init__(
            message=f"Package {name} not found",
            error_code=ErrorCode.STORAGE_NOT_FOUND,
            details=details,
        )
        self.name = name


class BlobWriteException(NonRetryableException):
    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(
            message=message,
            error_code=ErrorCode.STORAGE_BLOB_WRITE_ERROR,
            details=details,
            cause=cause,
        )
        self.filename = filename
