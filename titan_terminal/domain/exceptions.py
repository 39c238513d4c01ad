"""Domain exceptions.

Every error the engine reports derives from ``TitanError`` so the HTTP layer
can translate them in one place.
"""


class TitanError(Exception):
    """Base exception for portfolio engine operations."""


class InvalidPosition(TitanError):
    """Malformed position input; rejected without partial application."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid position {field}: {reason}")


class UnsupportedCurrency(TitanError):
    """Conversion or formatting requested for an unknown currency code."""

    def __init__(self, code: object):
        self.code = code
        super().__init__(f"Unsupported currency: {code}")


class PersistenceUnavailable(TitanError):
    """Position blob could not be read, parsed or written."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Persistence {operation} failed: {detail}")


class InsightUnavailable(TitanError):
    """No narrative insight could be produced for the portfolio."""
