"""Data models for the portfolio ledger.

Defines all core entities for account accounting:
- Asset: Holding of one instrument inside a portfolio
- Portfolio: Budgeted node of the portfolio tree
- Trade: Immutable ledger entry
- TradeIntent: Validated trade request
- NetWorthSnapshot: Point of the net-worth history
- AppState: Complete account snapshot (the persisted document)
- PositionView: Open-to-close lot reconstructed from the ledger
- PortfolioSummary: Aggregates for one portfolio or all roots

Persisted models serialize with camelCase aliases (avgBuyPrice,
rootPortfolios, tradeHistory, ...) so stored snapshots keep one stable shape.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Amounts at or below this are treated as zero (asset removal, position close)
EPSILON = Decimal("0.000001")

# Selection sentinel meaning "every root portfolio"
ALL_PORTFOLIOS_ID = "ALL_ROOT"


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def as_utc(value: datetime) -> datetime:
    """Naive datetimes (older snapshots) are taken to be UTC."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class TradeType(str, Enum):
    """Direction of a trade."""

    BUY = "buy"
    SELL = "sell"


class PositionStatus(str, Enum):
    """Lifecycle state of a reconstructed position."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Asset(BaseModel):
    """
    Holding of one named instrument inside a portfolio.

    Created on the first buy of a name, removed once the amount falls to
    EPSILON or below. ``current_price`` is the last observed or entered price
    and is independent of the cost basis.

    Attributes:
        id: Unique identifier
        name: Instrument name, unique within its portfolio
        symbol: Short ticker (defaults to first three letters of name)
        amount: Units held
        avg_buy_price: Weighted-average cost per unit
        current_price: Last known price per unit

    Example:
        >>> asset = Asset(
        ...     name="Bitcoin",
        ...     amount=Decimal("0.5"),
        ...     avg_buy_price=Decimal("60000"),
        ...     current_price=Decimal("65000"),
        ... )
        >>> asset.symbol
        'BIT'
    """

    id: str = Field(default_factory=lambda: new_id("ast"))
    name: str
    symbol: str = Field(default="", validate_default=True)
    amount: Decimal
    avg_buy_price: Decimal
    current_price: Decimal

    @field_validator("symbol")
    @classmethod
    def default_symbol(cls, v: str, info: ValidationInfo) -> str:
        """Derive symbol from name when not given."""
        if v:
            return v
        return str(info.data.get("name", ""))[:3].upper()

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        """Validate amount is not negative."""
        if v < 0:
            raise ValueError(f"Asset amount cannot be negative, got {v}")
        return v

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Portfolio(BaseModel):
    """
    Budgeted node of the portfolio tree.

    Each portfolio is owned by exactly one parent or is a root. Assets are
    keyed by name (at most one Asset per name).

    Attributes:
        id: Unique, stable identifier
        name: Display name
        allocation: Budgeted capital; grows/shrinks with realized P&L
        assets: Holdings in insertion order
        children: Sub-portfolios in insertion order
    """

    id: str = Field(default_factory=lambda: new_id("p"))
    name: str
    allocation: Decimal = Decimal("0")
    assets: list[Asset] = Field(default_factory=list)
    children: list["Portfolio"] = Field(default_factory=list)

    def get_asset(self, name: str) -> Asset | None:
        """Return the asset with this name, if held."""
        return next((a for a in self.assets if a.name == name), None)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Trade(BaseModel):
    """
    Immutable ledger entry.

    The ledger is the source of truth; asset and portfolio aggregates are a
    recomputable cache of it.

    Attributes:
        id: Unique identifier
        portfolio_id: Portfolio the trade was applied to
        trade_type: buy or sell (serialized as ``type``)
        asset_name: Instrument name
        amount: Units traded
        price: Price per unit in base currency
        total_value: amount * price in base currency
        fee: Fee paid, tracked outside cost basis
        timestamp: When the trade happened (ordering key)
        realized_pnl: (price - avg_buy_price) * amount, sells only
    """

    id: str = Field(default_factory=lambda: new_id("tr"))
    portfolio_id: str
    trade_type: TradeType = Field(alias="type")
    asset_name: str
    amount: Decimal
    price: Decimal
    total_value: Decimal
    fee: Decimal = Decimal("0")
    timestamp: datetime
    realized_pnl: Decimal | None = None

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_sell(self) -> bool:
        return self.trade_type == TradeType.SELL

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class TradeIntent(BaseModel):
    """
    Validated request to trade, before it touches the account.

    ``total_value`` defaults to ``amount * price`` when omitted.
    """

    trade_type: TradeType = Field(alias="type")
    asset_name: str
    amount: Decimal
    price: Decimal
    total_value: Decimal
    fee: Decimal = Decimal("0")

    @model_validator(mode="before")
    @classmethod
    def default_total_value(cls, data: Any) -> Any:
        """Fill total_value from amount * price when missing."""
        if not isinstance(data, dict):
            return data
        if data.get("total_value") is None and data.get("totalValue") is None:
            amount, price = data.get("amount"), data.get("price")
            if amount is not None and price is not None:
                data = {**data, "total_value": Decimal(str(amount)) * Decimal(str(price))}
        return data

    @field_validator("asset_name")
    @classmethod
    def validate_asset_name(cls, v: str) -> str:
        """Validate asset name is not blank."""
        if not v.strip():
            raise ValueError("Asset name cannot be empty")
        return v

    @field_validator("amount", "price", "total_value")
    @classmethod
    def validate_positive(cls, v: Decimal) -> Decimal:
        """Validate amount, price and total are positive."""
        if v <= 0:
            raise ValueError(f"Must be positive, got {v}")
        return v

    @field_validator("fee")
    @classmethod
    def validate_fee(cls, v: Decimal) -> Decimal:
        """Validate fee is not negative."""
        if v < 0:
            raise ValueError(f"Fee cannot be negative, got {v}")
        return v

    model_config = ConfigDict(frozen=True, populate_by_name=True)


def chronological(trades: list[Trade]) -> list[Trade]:
    """
    Trades in ascending timestamp order.

    Ledgers are stored newest first; the list is reversed before the stable
    sort so trades sharing a timestamp keep their submission order.
    """
    return sorted(reversed(trades), key=lambda t: t.timestamp)


class NetWorthSnapshot(BaseModel):
    """Cash plus total asset value at one instant."""

    date: datetime
    value: Decimal

    @field_validator("date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class AppState(BaseModel):
    """
    Immutable snapshot of the whole account.

    Every operation produces a new AppState; the old one is discarded.

    Attributes:
        cash: Liquid cash in base currency
        tether_price: Fixed secondary-currency rate (base units per tether)
        root_portfolios: Top-level portfolios
        trade_history: Ledger, newest first
        net_worth_history: Append-only net-worth series
        selected_portfolio_id: View selection (not used for computation)
    """

    cash: Decimal
    tether_price: Decimal = Decimal("60000")
    root_portfolios: list[Portfolio] = Field(default_factory=list)
    trade_history: list[Trade] = Field(default_factory=list)
    net_worth_history: list[NetWorthSnapshot] = Field(default_factory=list)
    selected_portfolio_id: str | None = None

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize to a plain JSON-compatible document."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "AppState":
        """Build state from a stored document (see persistence.migration)."""
        return cls.model_validate(data)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PositionView(BaseModel):
    """
    Position reconstructed from the ledger for one (portfolio, asset) key.

    Spans from the trade that makes the remaining amount positive to the
    trade that brings it back to ~zero.

    Attributes:
        id: ``pos-<first trade id>``
        asset_name: Instrument name
        portfolio_id: Owning portfolio
        status: OPEN or CLOSED
        total_buy_amount: Units bought over the position's life
        remaining_amount: Units still held
        avg_buy_price: Weighted-average cost of remaining units
        realized_pnl: Accumulated net P&L of sells (fees deducted)
        total_cost: Accumulated buy value
        trades: Constituent trades, ascending
        start_date: First trade time
        end_date: Closing trade time (CLOSED only)
        last_update_date: Most recent trade time
        duration_days: Whole days from start to end (or now), rounded up
    """

    id: str
    asset_name: str
    portfolio_id: str
    status: PositionStatus = PositionStatus.OPEN
    total_buy_amount: Decimal = Decimal("0")
    remaining_amount: Decimal = Decimal("0")
    avg_buy_price: Decimal = Decimal("0")
    realized_pnl: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    trades: list[Trade] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime | None = None
    last_update_date: datetime | None = None
    duration_days: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)  # NOT frozen - built incrementally


class PortfolioSummary(BaseModel):
    """
    Aggregates for one portfolio subtree, or for all roots.

    Attributes:
        portfolio_id: Selected portfolio (ALL_PORTFOLIOS_ID for all roots)
        allocation: Budget of the selection (sum of roots for all)
        total_value: Market value of the subtree(s)
        total_cost: Cost basis of the subtree(s)
        unrealized_pnl: total_value - total_cost
        unrealized_pnl_pct: unrealized_pnl / total_cost * 100 (0 if no cost)
        realized_pnl: Sum of realized P&L of trades in scope
        total_pnl: realized + unrealized
        allocation_pct: allocation / net worth * 100 (0 if no net worth)
        assets: Every asset in scope, flattened
        trades: Trades in scope, newest first
    """

    portfolio_id: str
    allocation: Decimal
    total_value: Decimal
    total_cost: Decimal
    unrealized_pnl: Decimal
    unrealized_pnl_pct: Decimal
    realized_pnl: Decimal
    total_pnl: Decimal
    allocation_pct: Decimal
    assets: list[Asset] = Field(default_factory=list)
    trades: list[Trade] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


Portfolio.model_rebuild()
