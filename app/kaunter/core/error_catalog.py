from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    NO_ACTIVE_CASH_REGISTER = ErrorDefinition(
        "NO_ACTIVE_CASH_REGISTER",
        "No active cash register. Please open the cash register first",
        status.HTTP_409_CONFLICT,
    )
    PRODUCT_NOT_FOUND_OR_INACTIVE = ErrorDefinition(
        "PRODUCT_NOT_FOUND_OR_INACTIVE",
        "Product not found or inactive",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    PAYMENT_METHOD_NOT_FOUND_OR_INACTIVE = ErrorDefinition(
        "PAYMENT_METHOD_NOT_FOUND_OR_INACTIVE",
        "Payment method not found or inactive",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    CASH_REGISTER_ALREADY_OPEN = ErrorDefinition(
        "CASH_REGISTER_ALREADY_OPEN",
        "A cash register is already open",
        status.HTTP_409_CONFLICT,
    )
    CASH_REGISTER_ALREADY_CLOSED = ErrorDefinition(
        "CASH_REGISTER_ALREADY_CLOSED",
        "Cash register is already closed",
        status.HTTP_409_CONFLICT,
    )
    CASH_REGISTER_NOT_FOUND = ErrorDefinition(
        "CASH_REGISTER_NOT_FOUND",
        "Cash register not found",
        status.HTTP_404_NOT_FOUND,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
