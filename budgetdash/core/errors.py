"""Domain errors shared by services, crud helpers and the HTTP layer.

The API maps these in ``main.create_app``: ``ValidationError`` becomes 400,
``NotFoundError`` 404 and ``StoreUnavailableError`` 503.
"""


class BudgetDashError(Exception):
    """Base class for errors raised by budgetdash itself."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BudgetDashError):
    """Bad input: unknown division, non-positive year, malformed upload..."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(BudgetDashError):
    pass


class StoreUnavailableError(BudgetDashError):
    """The fact or merge-rule store could not be read. Never retried here."""
