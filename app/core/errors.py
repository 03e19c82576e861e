from enum import Enum
from typing import List, Optional
from fastapi import status


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"


# Upload policy violations keep their own statuses in every mode
UPLOAD_STATUS_CODES = {
    ErrorCode.PAYLOAD_TOO_LARGE: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorCode.UNSUPPORTED_MEDIA_TYPE: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
}

DISTINCT_STATUS_CODES = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ProductError(Exception):
    """Typed failure raised by the product service, controller and storage"""

    def __init__(self, code: ErrorCode, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.errors = errors

    @classmethod
    def not_found(cls, message: str) -> "ProductError":
        return cls(ErrorCode.NOT_FOUND, message)

    @classmethod
    def validation(cls, message: str, errors: Optional[List[str]] = None) -> "ProductError":
        return cls(ErrorCode.VALIDATION_FAILED, message, errors)

    @classmethod
    def conflict(cls, message: str) -> "ProductError":
        return cls(ErrorCode.CONFLICT, message)

    @classmethod
    def internal(cls, message: str) -> "ProductError":
        return cls(ErrorCode.INTERNAL, message)


def resolve_status_code(code: ErrorCode, distinct: bool) -> int:
    if code in UPLOAD_STATUS_CODES:
        return UPLOAD_STATUS_CODES[code]
    if distinct:
        return DISTINCT_STATUS_CODES[code]
    return status.HTTP_400_BAD_REQUEST


def error_body(error: ProductError, status_code: int) -> dict:
    body = {
        "message": error.message,
        "error_code": error.code.value,
        "success": False,
        "status_code": status_code,
    }
    if error.errors is not None:
        body["errors"] = error.errors
    return body
