from typing import Optional, Dict, Any

from reworkit.common.exceptions.base_exceptions import (
    RetryableException,
    ErrorCode,
)


class TransportException(RetryableException):
    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        if response_body:
            details["response_body"] = response_body[:500]
        super().__init__(
            message=message,
            error_code=ErrorCode.COLLECTOR_REJECTED if status_code else ErrorCode.TRANSPORT_ERROR,
            details=details,
            cause=cause,
        )
        self.url = url
        self.status_code = status_code
        self.response_body = response_body
