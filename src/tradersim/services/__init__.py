"""tradersim services package.

Each service is independently testable and talks to its collaborators through
Protocol interfaces using dependency injection.
"""

from tradersim.services.portfolio import ILedgerService, LedgerService

__all__: list[str] = [
    "ILedgerService",
    "LedgerService",
]
