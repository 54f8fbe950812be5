"""Domain exceptions raised by the service layer.

Each error carries the HTTP status it maps to; the handlers registered in
``invest_tracker.main`` turn them into the standard error envelope.
"""

from typing import Any, Optional


class InvestTrackerError(Exception):
    """Base class for expected, client-facing failures."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class NotFoundError(InvestTrackerError):
    """Entity is absent or not owned by the caller."""

    status_code = 404


class DomainValidationError(InvestTrackerError):
    """Input passed schema validation but violates a business rule."""

    status_code = 400


class InsufficientHoldingsError(InvestTrackerError):
    """A sell (or a ledger edit) would drive held quantity negative."""

    status_code = 400

    def __init__(self, message: str = "Insufficient holdings for this transaction"):
        super().__init__(message)


class ConflictError(InvestTrackerError):
    """Uniqueness violation such as a duplicate category name."""

    status_code = 400


class AuthenticationError(InvestTrackerError):
    status_code = 401


class UpstreamError(InvestTrackerError):
    """An external price source failed or returned unusable data."""

    status_code = 502
