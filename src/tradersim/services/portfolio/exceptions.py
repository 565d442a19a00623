"""Ledger error taxonomy.

Validation errors reject an operation and leave the account unchanged.
Lookup errors name an id that is not in the current snapshot.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base exception for ledger errors."""

    pass


class LedgerValidationError(LedgerError):
    """Operation rejected; state left unchanged."""

    pass


class InsufficientFundsError(LedgerValidationError):
    """Buy (or withdrawal) needs more cash than available."""

    def __init__(self, required: Decimal, available: Decimal) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Insufficient cash: required {required}, available {available}")


class InsufficientHoldingsError(LedgerValidationError):
    """Sell of more units than the portfolio holds."""

    def __init__(self, asset_name: str, requested: Decimal, held: Decimal) -> None:
        self.asset_name = asset_name
        self.requested = requested
        self.held = held
        super().__init__(f"Insufficient holdings of '{asset_name}': requested {requested}, held {held}")


class AllocationExceededError(LedgerValidationError):
    """New allocation would push siblings over the parent budget (or net worth)."""

    def __init__(self, requested_total: Decimal, limit: Decimal) -> None:
        self.requested_total = requested_total
        self.limit = limit
        super().__init__(f"Allocated total {requested_total} would exceed available budget {limit}")


class InvalidAmountError(LedgerValidationError):
    """Amount or price outside its allowed range."""

    pass


class PortfolioNotFoundError(LedgerError):
    """Portfolio id not present in the tree."""

    def __init__(self, portfolio_id: str) -> None:
        self.portfolio_id = portfolio_id
        super().__init__(f"Portfolio '{portfolio_id}' not found")


class TradeNotFoundError(LedgerError):
    """Trade id not present in the ledger."""

    def __init__(self, trade_id: str) -> None:
        self.trade_id = trade_id
        super().__init__(f"Trade '{trade_id}' not found")


class AssetNotFoundError(LedgerError):
    """Asset id not present in any portfolio."""

    def __init__(self, asset_id: str) -> None:
        self.asset_id = asset_id
        super().__init__(f"Asset '{asset_id}' not found")
