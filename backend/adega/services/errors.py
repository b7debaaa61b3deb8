# Overview: Typed failures raised by the service layer and rendered by the routes.

"""
Service error taxonomy.

Every failure leaves zero persisted side effects: services raise these from
inside their transaction and the retry wrapper rolls back before re-raising.
Only TransactionConflict is safe to retry automatically.
"""


class ServiceError(Exception):
    """Base class; carries a human-readable message and structured details."""

    code = "service_error"
    http_status = 400
    retryable = False

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
            "retryable": self.retryable,
        }


class ValidationError(ServiceError):
    """Malformed input: empty cart, non-positive quantity, unknown payment method."""
    code = "validation_error"


class ProductNotFound(ServiceError):
    code = "product_not_found"
    http_status = 404


class CustomerNotFound(ServiceError):
    code = "customer_not_found"
    http_status = 404


class InsufficientStock(ServiceError):
    code = "insufficient_stock"
    http_status = 409


class CustomerRequiredForCredit(ServiceError):
    code = "customer_required_for_credit"


class CreditLimitExceeded(ServiceError):
    code = "credit_limit_exceeded"
    http_status = 409


class TransactionConflict(ServiceError):
    """Concurrent modification or lock timeout; the whole operation may be retried."""
    code = "transaction_conflict"
    http_status = 409
    retryable = True


class PersistenceFailure(ServiceError):
    """Storage-layer error. The transaction was rolled back."""
    code = "persistence_failure"
    http_status = 500
