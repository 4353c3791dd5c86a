"""Domain-specific exceptions for payments services."""


class PaymentsServiceError(Exception):
    """Base exception for payments services."""
    pass


class PaymentNotFoundError(PaymentsServiceError):
    """Raised when a payment does not exist or is not visible to the user."""
    pass


class PaymentAlreadyPaidError(PaymentsServiceError):
    """Raised when marking an already settled payment as paid."""
    pass


class PaymentCancelledError(PaymentsServiceError):
    """Raised when money or discounts are applied to a cancelled payment."""
    pass


class InvalidPaymentOperationError(PaymentsServiceError):
    """Raised when payment input breaks a business rule (currency, amounts)."""
    pass
