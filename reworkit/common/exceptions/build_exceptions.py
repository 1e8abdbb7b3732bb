from typing import Optional, Dict, Any, List

from reworkit.common.exceptions.base_exceptions import (
    NonRetryableException,
    ErrorCode,
)


class ExternalToolException(NonRetryableException):
    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        exit_code: Optional[int] = None,
        output: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.EXTERNAL_TOOL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if command:
            details["command"] = " ".join(command)
        if exit_code is not None:
            details["exit_code"] = exit_code
        if output:
            details["output"] = output[-1000:]
        super().__init__(message, error_code, details, cause)
        self.command = command
        self.exit_code = exit_code
        self.output = output


class CodecException(NonRetryableException):
    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.CODEC_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, error_code, details, cause)
        self.operation = operation
