"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for record operations."""

    # Authorization errors
    UNAUTHORIZED = "UNAUTHORIZED"
    ADDRESS_MISMATCH = "ADDRESS_MISMATCH"

    # Validation errors
    HANDLE_TOO_LONG = "HANDLE_TOO_LONG"
    TITLE_TOO_LONG = "TITLE_TOO_LONG"
    CONTENT_TOO_LONG = "CONTENT_TOO_LONG"

    # Arithmetic errors
    OVERFLOW = "OVERFLOW"

    # Store errors
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    OUT_OF_SPACE = "OUT_OF_SPACE"
    INVALID_RECORD = "INVALID_RECORD"

    # Derivation errors
    DERIVATION_FAILED = "DERIVATION_FAILED"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(self.message)


class UnauthorizedError(AppException):
    """Caller is not the owner, or a back-reference does not match."""

    def __init__(self, message: str = "Operation not authorized") -> None:
        super().__init__(
            error_code=ErrorCode.UNAUTHORIZED,
            message=message,
        )


class AddressMismatchError(AppException):
    """The presented record does not live at its derived address."""

    def __init__(self, presented: str, expected: str) -> None:
        super().__init__(
            error_code=ErrorCode.ADDRESS_MISMATCH,
            message=f"Record address mismatch: {presented}",
            details={"presented": presented, "expected": expected},
        )


class _FieldTooLongError(AppException):
    """A text field exceeds its fixed byte budget."""

    code: ErrorCode
    field_name: str

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            error_code=self.code,
            message=f"{self.field_name.capitalize()} exceeds maximum length",
            details={"field": self.field_name, "length": length, "limit": limit},
        )


class HandleTooLongError(_FieldTooLongError):
    """Handle exceeds maximum length."""

    code = ErrorCode.HANDLE_TOO_LONG
    field_name = "handle"


class TitleTooLongError(_FieldTooLongError):
    """Title exceeds maximum length."""

    code = ErrorCode.TITLE_TOO_LONG
    field_name = "title"


class ContentTooLongError(_FieldTooLongError):
    """Content exceeds maximum length."""

    code = ErrorCode.CONTENT_TOO_LONG
    field_name = "content"


class CounterOverflowError(AppException):
    """Sequence counter is exhausted."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.OVERFLOW,
            message="Arithmetic overflow occurred",
        )


class RecordAlreadyExistsError(AppException):
    """A record (live or closed) already occupies the address."""

    def __init__(self, address: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_EXISTS,
            message=f"Record already exists: {address}",
            details={"address": address},
        )


class RecordNotFoundError(AppException):
    """No live record at the address."""

    def __init__(self, address: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_FOUND,
            message=f"Record not found: {address}",
            details={"address": address},
        )


class OutOfSpaceError(AppException):
    """The store cannot allocate or fit the requested bytes."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            error_code=ErrorCode.OUT_OF_SPACE,
            message=f"Record size {size} exceeds limit {limit}",
            details={"size": size, "limit": limit},
        )


class InvalidRecordError(AppException):
    """Record bytes do not decode as the expected record type."""

    def __init__(self, record_type: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_RECORD,
            message=f"Invalid {record_type} record: {reason}",
            details={"record_type": record_type},
        )


class AddressDerivationError(AppException):
    """Seeds are malformed or no nonce yields a valid address."""

    def __init__(self, message: str = "Unable to derive a valid address") -> None:
        super().__init__(
            error_code=ErrorCode.DERIVATION_FAILED,
            message=message,
        )
