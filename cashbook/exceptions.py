"""Custom exceptions for the Cashbook ledger."""


class CashbookError(Exception):
    """Base exception for all Cashbook errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ValidationError(CashbookError):
    """Raised when an input is rejected (zero amount, bad type, bad date...)."""

    def __init__(self, message: str, field: str = None, value=None):
        details = {}
        if field:
            details['field'] = field
            details['value'] = value
        super().__init__(message, details)


class NotFoundError(CashbookError):
    """Raised when a requested record does not exist."""
    pass


class TransactionNotFoundError(NotFoundError):
    """Raised when a ledger transaction cannot be found."""

    def __init__(self, transaction_id: int):
        super().__init__(
            f"Transaction with ID {transaction_id} not found",
            {'transaction_id': transaction_id}
        )


class StorageError(CashbookError):
    """Raised when a persistence read or write fails."""
    pass
