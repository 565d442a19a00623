"""Portfolio ledger for a multi-portfolio trading account.

This package keeps a tree of budgeted portfolios, applies buy/sell trades
with weighted-average cost accounting, propagates realized P&L up the tree,
rebuilds holdings from the ledger when a trade is deleted, and records the
net-worth history.

Key components:
- LedgerService: Main service implementation (single writer of AppState)
- ILedgerService: Protocol interface
- Models: Asset, Portfolio, Trade, TradeIntent, AppState, PositionView
- Pure helpers: tree, executor, replay, positions, analytics

Example:
    >>> from decimal import Decimal
    >>> from tradersim.services.portfolio import LedgerService, TradeIntent
    >>>
    >>> ledger = LedgerService.initialize(initial_cash=Decimal("1000000"))
    >>> crypto = ledger.add_portfolio("Crypto", Decimal("500000"))
    >>> ledger.trade(
    ...     crypto.id,
    ...     TradeIntent(type="buy", asset_name="BTC", amount=Decimal("0.5"), price=Decimal("2000")),
    ... )
    >>> print(f"Cash: {ledger.state.cash}")
    >>> print(f"Net worth: {ledger.get_net_worth()}")
"""

from tradersim.services.portfolio.exceptions import (
    AllocationExceededError,
    AssetNotFoundError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    InvalidAmountError,
    LedgerError,
    LedgerValidationError,
    PortfolioNotFoundError,
    TradeNotFoundError,
)
from tradersim.services.portfolio.interface import ILedgerService
from tradersim.services.portfolio.models import (
    ALL_PORTFOLIOS_ID,
    EPSILON,
    AppState,
    Asset,
    NetWorthSnapshot,
    Portfolio,
    PortfolioSummary,
    PositionStatus,
    PositionView,
    Trade,
    TradeIntent,
    TradeType,
)
from tradersim.services.portfolio.service import LedgerService

__all__ = [
    # Service
    "ILedgerService",
    "LedgerService",
    # Models
    "ALL_PORTFOLIOS_ID",
    "EPSILON",
    "AppState",
    "Asset",
    "NetWorthSnapshot",
    "Portfolio",
    "PortfolioSummary",
    "PositionStatus",
    "PositionView",
    "Trade",
    "TradeIntent",
    "TradeType",
    # Errors
    "LedgerError",
    "LedgerValidationError",
    "InsufficientFundsError",
    "InsufficientHoldingsError",
    "AllocationExceededError",
    "InvalidAmountError",
    "PortfolioNotFoundError",
    "TradeNotFoundError",
    "AssetNotFoundError",
]
