"""Ledger service implementation.

Single writer for the account snapshot. Each operation computes the next
AppState from the current one with the pure helpers in this package
(tree, executor, replay, net_worth) and installs it in one step, then
notifies subscribers (e.g. the persistence synchronizer).
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from tradersim.services.portfolio import analytics, net_worth, positions, replay, tree
from tradersim.services.portfolio.cost_basis import net_worth as compute_net_worth
from tradersim.services.portfolio.exceptions import (
    AssetNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    LedgerValidationError,
    PortfolioNotFoundError,
)
from tradersim.services.portfolio.executor import execute_trade
from tradersim.services.portfolio.interface import StateListener
from tradersim.services.portfolio.models import (
    ALL_PORTFOLIOS_ID,
    AppState,
    Portfolio,
    PortfolioSummary,
    PositionView,
    Trade,
    TradeIntent,
    new_id,
)
from tradersim.system import LoggerFactory
from tradersim.system.config import AccountConfig

logger = LoggerFactory.get_logger()

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LedgerService:
    """
    Ledger service for a multi-portfolio trading account.

    Attributes:
        _state: Current account snapshot (replaced, never mutated)
        _clock: Time source for trades and net-worth snapshots
        _id_factory: Id generator, called with a prefix ("p", "tr")
        _listeners: Callbacks receiving every installed snapshot

    Example:
        >>> ledger = LedgerService.initialize(initial_cash=Decimal("1000000"))
        >>> p = ledger.add_portfolio("Crypto", Decimal("500000"))
        >>> ledger.trade(p.id, TradeIntent(type="buy", asset_name="BTC", amount=Decimal("1"), price=Decimal("1000")))
        >>> ledger.state.cash
        Decimal('999000')
    """

    def __init__(
        self,
        state: AppState,
        clock: Clock | None = None,
        id_factory: Callable[[str], str] | None = None,
    ) -> None:
        """
        Initialize ledger service.

        Args:
            state: Starting snapshot (used as-is, history not re-seeded)
            clock: Time source (defaults to current UTC time)
            id_factory: Id generator (defaults to random short ids)
        """
        self._state = state
        self._clock = clock or _utc_now
        self._id_factory = id_factory or new_id
        self._listeners: list[StateListener] = []

    @classmethod
    def initialize(
        cls,
        initial_cash: Decimal,
        portfolios: list[Portfolio] | None = None,
        tether_price: Decimal = Decimal("60000"),
        clock: Clock | None = None,
        id_factory: Callable[[str], str] | None = None,
    ) -> "LedgerService":
        """
        Create a fresh account whose net-worth history holds one point.

        Args:
            initial_cash: Starting cash
            portfolios: Optional root portfolios to seed (not budget-checked)
            tether_price: Secondary-currency rate
            clock: Time source
            id_factory: Id generator
        """
        service = cls(
            AppState(cash=initial_cash, tether_price=tether_price, root_portfolios=portfolios or []),
            clock=clock,
            id_factory=id_factory,
        )
        service._state = net_worth.seed_history(service._state, service._clock())
        logger.debug("ledger.initialized", cash=str(initial_cash), portfolios=len(portfolios or []))
        return service

    @classmethod
    def from_account_config(
        cls,
        config: AccountConfig,
        clock: Clock | None = None,
        id_factory: Callable[[str], str] | None = None,
    ) -> "LedgerService":
        """Create a fresh account from the ``account`` section of the system config."""
        portfolios = [Portfolio.model_validate(p) for p in config.seed_portfolios]
        return cls.initialize(
            initial_cash=Decimal(config.initial_cash),
            portfolios=portfolios,
            tether_price=Decimal(config.tether_price),
            clock=clock,
            id_factory=id_factory,
        )

    # ==================== State ====================

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def load_state(self, state: AppState) -> None:
        """Adopt a stored snapshot. Listeners are not notified."""
        self._state = state
        logger.debug("ledger.state_loaded", trades=len(state.trade_history))

    def _install(self, state: AppState) -> None:
        self._state = state
        for listener in self._listeners:
            listener(state)

    def _reject(self, operation: str, error: LedgerValidationError) -> None:
        logger.warning(f"ledger.{operation}_rejected", reason=str(error))

    # ==================== Portfolio Tree ====================

    def add_portfolio(self, name: str, allocation: Decimal, parent_id: str | None = None) -> Portfolio:
        """
        Create a portfolio as a root or under parent_id.

        Sibling allocations (including the new one) must fit the parent's
        allocation, or the account net worth for roots.

        Raises:
            InvalidAmountError: Negative allocation
            AllocationExceededError: Budget exceeded
            PortfolioNotFoundError: Unknown parent
        """
        state = self._state
        try:
            if allocation < 0:
                raise InvalidAmountError(f"Allocation cannot be negative, got {allocation}")
            tree.validate_new_allocation(
                state.root_portfolios,
                parent_id,
                allocation,
                compute_net_worth(state.cash, state.root_portfolios),
            )
        except LedgerValidationError as e:
            self._reject("portfolio", e)
            raise

        portfolio = Portfolio(id=self._id_factory("p"), name=name, allocation=allocation)
        roots = tree.insert(state.root_portfolios, parent_id, portfolio)
        self._install(state.model_copy(update={"root_portfolios": roots}))
        logger.info("ledger.portfolio_added", portfolio_id=portfolio.id, name=name, parent_id=parent_id)
        return portfolio

    def edit_portfolio(self, portfolio_id: str, name: str, allocation: Decimal) -> Portfolio:
        roots = tree.edit(self._state.root_portfolios, portfolio_id, name, allocation)
        self._install(self._state.model_copy(update={"root_portfolios": roots}))
        logger.info("ledger.portfolio_edited", portfolio_id=portfolio_id, name=name)
        return tree.require(roots, portfolio_id)

    def delete_portfolio(self, portfolio_id: str) -> None:
        """
        Delete a portfolio and its subtree.

        The held assets vanish with it (their value is not returned to cash)
        and trades that referenced it stay in the ledger. A selection inside
        the removed subtree is cleared.
        """
        state = self._state
        node = tree.require(state.root_portfolios, portfolio_id)
        removed = tree.all_ids(node)

        update: dict = {"root_portfolios": tree.delete(state.root_portfolios, portfolio_id)}
        if state.selected_portfolio_id in removed:
            update["selected_portfolio_id"] = None

        self._install(net_worth.record(state.model_copy(update=update), self._clock()))
        logger.info("ledger.portfolio_deleted", portfolio_id=portfolio_id, removed=len(removed))

    def select_portfolio(self, portfolio_id: str | None) -> None:
        if portfolio_id not in (None, ALL_PORTFOLIOS_ID):
            tree.require(self._state.root_portfolios, portfolio_id)
        self._install(self._state.model_copy(update={"selected_portfolio_id": portfolio_id}))

    # ==================== Trading ====================

    def trade(self, portfolio_id: str, intent: TradeIntent) -> Trade:
        """
        Apply a buy or sell.

        Raises:
            PortfolioNotFoundError: Unknown portfolio
            InsufficientFundsError: Buy exceeds cash
            InsufficientHoldingsError: Sell exceeds holdings
        """
        try:
            result = execute_trade(
                self._state,
                portfolio_id,
                intent,
                timestamp=self._clock(),
                trade_id=self._id_factory("tr"),
            )
        except LedgerValidationError as e:
            logger.warning(
                "ledger.trade_rejected",
                portfolio_id=portfolio_id,
                trade_type=intent.trade_type.value,
                asset=intent.asset_name,
                reason=str(e),
            )
            raise

        self._install(result.state)
        trade = result.trade
        logger.info(
            "ledger.trade_executed",
            trade_id=trade.id,
            portfolio_id=portfolio_id,
            trade_type=trade.trade_type.value,
            asset=trade.asset_name,
            amount=str(trade.amount),
            price=str(trade.price),
            realized_pnl=str(trade.realized_pnl) if trade.realized_pnl is not None else None,
        )
        return trade

    def delete_trade(self, trade_id: str) -> None:
        """
        Remove a trade and rebuild its portfolio from the remaining ledger.

        Raises:
            TradeNotFoundError: Unknown trade id
        """
        self._install(replay.delete_trade(self._state, trade_id, self._clock()))
        logger.info("ledger.trade_deleted", trade_id=trade_id)

    # ==================== Cash & Prices ====================

    def deposit(self, amount: Decimal) -> None:
        """Add cash (must be positive)."""
        if amount <= 0:
            error = InvalidAmountError(f"Deposit must be positive, got {amount}")
            self._reject("deposit", error)
            raise error
        state = self._state.model_copy(update={"cash": self._state.cash + amount})
        self._install(net_worth.record(state, self._clock()))
        logger.info("ledger.deposit", amount=str(amount), cash=str(state.cash))

    def withdraw(self, amount: Decimal) -> None:
        """Remove cash (must be positive and no more than available)."""
        try:
            if amount <= 0:
                raise InvalidAmountError(f"Withdrawal must be positive, got {amount}")
            if amount > self._state.cash:
                raise InsufficientFundsError(amount, self._state.cash)
        except LedgerValidationError as e:
            self._reject("withdraw", e)
            raise
        state = self._state.model_copy(update={"cash": self._state.cash - amount})
        self._install(net_worth.record(state, self._clock()))
        logger.info("ledger.withdraw", amount=str(amount), cash=str(state.cash))

    def update_asset_price(self, asset_id: str, price: Decimal, portfolio_id: str | None = None) -> None:
        """
        Set current_price of an asset, searched by id in every portfolio
        (or only in portfolio_id when given).

        Raises:
            InvalidAmountError: Non-positive price
            AssetNotFoundError: No asset with this id
            PortfolioNotFoundError: Unknown portfolio_id
        """
        if price <= 0:
            error = InvalidAmountError(f"Price must be positive, got {price}")
            self._reject("price_update", error)
            raise error

        roots = self._state.root_portfolios
        candidates = [tree.require(roots, portfolio_id)] if portfolio_id else tree.flatten(roots)
        owner = next((p for p in candidates if any(a.id == asset_id for a in p.assets)), None)
        if owner is None:
            raise AssetNotFoundError(asset_id)

        assets = [a.model_copy(update={"current_price": price}) if a.id == asset_id else a for a in owner.assets]
        roots = tree.replace(roots, owner.model_copy(update={"assets": assets}))
        state = self._state.model_copy(update={"root_portfolios": roots})
        self._install(net_worth.record(state, self._clock()))
        logger.info("ledger.price_updated", asset_id=asset_id, portfolio_id=owner.id, price=str(price))

    def set_tether_price(self, price: Decimal) -> None:
        if price <= 0:
            error = InvalidAmountError(f"Tether price must be positive, got {price}")
            self._reject("tether_price", error)
            raise error
        self._install(self._state.model_copy(update={"tether_price": price}))

    # ==================== Queries ====================

    def get_portfolio(self, portfolio_id: str) -> Portfolio:
        return tree.require(self._state.root_portfolios, portfolio_id)

    def get_net_worth(self) -> Decimal:
        return compute_net_worth(self._state.cash, self._state.root_portfolios)

    def positions(self, portfolio_id: str = ALL_PORTFOLIOS_ID) -> list[PositionView]:
        if portfolio_id != ALL_PORTFOLIOS_ID and tree.find(self._state.root_portfolios, portfolio_id) is None:
            raise PortfolioNotFoundError(portfolio_id)
        return positions.positions_for_portfolio(self._state, portfolio_id, now=self._clock())

    def summary(self, portfolio_id: str = ALL_PORTFOLIOS_ID) -> PortfolioSummary:
        return analytics.summarize(self._state, portfolio_id)
