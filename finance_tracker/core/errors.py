"""Domain exceptions raised by the services and routers.

Every subclass maps to one HTTP status; ``main.create_app`` renders them as
``{"error": message}``.
"""


class FinanceTrackerError(Exception):
    """Base exception for all finance tracker errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FinanceTrackerError):
    """Raised when an amount, currency code or budget definition is invalid."""

    status_code = 400


class ConflictError(ValidationError):
    """Raised when a row would duplicate an existing budget."""

    status_code = 409


class NotFoundError(FinanceTrackerError):
    """Raised when a referenced category, transaction or budget is absent."""

    status_code = 404


class UpstreamError(FinanceTrackerError):
    """Raised when the exchange-rate provider is unreachable or fails."""

    status_code = 502
