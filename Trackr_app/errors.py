# Trackr_app/errors.py
"""
Error types raised by the storage layer
"""


class StoreError(Exception):
    """Persistence failure (connectivity, constraint violation, ...).

    Raised by TradeStorage with the original SQLAlchemy error chained as
    ``__cause__``. Callers translate it into a 500 response.
    """

    def __init__(self, operation: str, message: str = None):
        self.operation = operation
        super().__init__(message or f"Store operation '{operation}' failed")


class InvalidTradeError(ValueError):
    """Trade values that pass field validation but cannot be stored together,
    e.g. a pnl beyond the range of its column. Callers answer 400.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)
