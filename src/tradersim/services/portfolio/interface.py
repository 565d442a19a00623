"""Ledger service interface (Protocol).

Defines the contract that all ledger service implementations must satisfy.
Enables dependency injection (CLI, persistence sync) and makes the service
independently testable.
"""

from decimal import Decimal
from typing import Callable, Protocol

from tradersim.services.portfolio.models import (
    ALL_PORTFOLIOS_ID,
    AppState,
    Portfolio,
    PortfolioSummary,
    PositionView,
    Trade,
    TradeIntent,
)

StateListener = Callable[[AppState], None]


class ILedgerService(Protocol):
    """
    Ledger service interface for a multi-portfolio trading account.

    Owns the current AppState. Every mutating call computes the next snapshot
    from the current one and installs it in a single step; on a rejected
    operation the snapshot is left untouched and the error is raised.

    Core responsibilities:
    - Maintain the portfolio tree (create, edit, delete, select)
    - Apply buy/sell trades and keep the ledger
    - Rebuild holdings when a historical trade is deleted
    - Track cash (deposits, withdrawals, trades)
    - Record net worth after every value-changing operation
    - Derive positions and summaries from the ledger

    Example:
        >>> ledger: ILedgerService = LedgerService.initialize(initial_cash=Decimal("1000000"))
        >>> ledger.trade("p-1", TradeIntent(type="buy", asset_name="Gold", amount=Decimal("2"), price=Decimal("100")))
        >>> print(ledger.summary().total_value)
    """

    @property
    def state(self) -> AppState:
        """Current account snapshot."""
        ...

    def subscribe(self, listener: StateListener) -> None:
        """Register a callback invoked with every newly installed snapshot."""
        ...

    def load_state(self, state: AppState) -> None:
        """Replace the account snapshot wholesale (no history recorded, no listeners)."""
        ...

    # ==================== Portfolio Tree ====================

    def add_portfolio(self, name: str, allocation: Decimal, parent_id: str | None = None) -> Portfolio:
        """
        Create a portfolio under parent_id (or as a root).

        Raises:
            AllocationExceededError: Sibling budgets would exceed parent (or net worth)
            InvalidAmountError: Negative allocation
            PortfolioNotFoundError: Unknown parent
        """
        ...

    def edit_portfolio(self, portfolio_id: str, name: str, allocation: Decimal) -> Portfolio:
        """Rename/rebudget a portfolio (no budget re-validation)."""
        ...

    def delete_portfolio(self, portfolio_id: str) -> None:
        """Delete a portfolio and its subtree; records net worth."""
        ...

    def select_portfolio(self, portfolio_id: str | None) -> None:
        """Change the view selection (ALL_PORTFOLIOS_ID, a portfolio id or None)."""
        ...

    # ==================== Trading ====================

    def trade(self, portfolio_id: str, intent: TradeIntent) -> Trade:
        """
        Apply a buy/sell to a portfolio.

        Raises:
            InsufficientFundsError: Buy exceeds cash
            InsufficientHoldingsError: Sell exceeds holdings
            PortfolioNotFoundError: Unknown portfolio
        """
        ...

    def delete_trade(self, trade_id: str) -> None:
        """
        Remove a ledger entry and rebuild the affected portfolio.

        Raises:
            TradeNotFoundError: Unknown trade id
        """
        ...

    # ==================== Cash & Prices ====================

    def deposit(self, amount: Decimal) -> None:
        """Add cash; records net worth."""
        ...

    def withdraw(self, amount: Decimal) -> None:
        """Remove cash; records net worth."""
        ...

    def update_asset_price(self, asset_id: str, price: Decimal, portfolio_id: str | None = None) -> None:
        """Set an asset's current price manually; records net worth."""
        ...

    def set_tether_price(self, price: Decimal) -> None:
        """Set the fixed secondary-currency rate."""
        ...

    # ==================== Queries ====================

    def get_portfolio(self, portfolio_id: str) -> Portfolio:
        """Portfolio by id (raises PortfolioNotFoundError)."""
        ...

    def get_net_worth(self) -> Decimal:
        """Cash plus market value of every portfolio."""
        ...

    def positions(self, portfolio_id: str = ALL_PORTFOLIOS_ID) -> list[PositionView]:
        """Positions reconstructed from the ledger, newest first."""
        ...

    def summary(self, portfolio_id: str = ALL_PORTFOLIOS_ID) -> PortfolioSummary:
        """Value, cost and P&L aggregates for a selection."""
        ...
