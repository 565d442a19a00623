"""Trade executor.

Applies one buy/sell to an account snapshot and returns the next snapshot.

Buy:
    existing asset -> amount += n, avg = (amount*avg + total_value) / new amount
    new asset      -> avg = current = trade price
    cash -= total_value + fee

Sell:
    realized_pnl = (price - avg_buy_price) * n      (fee excluded)
    remaining <= EPSILON -> asset removed, else amount reduced
    avg_buy_price unchanged, current_price = trade price
    cash += total_value - fee
    allocation of portfolio and ancestors += realized_pnl - fee

The asset-list rules (apply_buy / apply_sell) are shared with replay so that
rebuilding from the ledger and trading incrementally give the same result.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tradersim.services.portfolio import net_worth, tree
from tradersim.services.portfolio.cost_basis import is_zero, weighted_average
from tradersim.services.portfolio.exceptions import InsufficientFundsError, InsufficientHoldingsError
from tradersim.services.portfolio.models import AppState, Asset, Trade, TradeIntent, TradeType
from tradersim.services.portfolio.pnl import propagate_pnl


@dataclass(frozen=True)
class TradeResult:
    """Outcome of a successful trade."""

    state: AppState
    trade: Trade


def apply_buy(
    assets: list[Asset],
    asset_name: str,
    amount: Decimal,
    price: Decimal,
    total_value: Decimal,
    asset_id: str | None = None,
) -> list[Asset]:
    """
    Add units of asset_name to an asset list.

    Args:
        assets: Current holdings
        asset_name: Instrument bought
        amount: Units bought
        price: Price per unit (becomes current_price)
        total_value: Amount paid, used for the weighted average
        asset_id: Id for a newly created asset (generated if None)

    Returns:
        New asset list (existing asset updated in place, new one appended)
    """
    result = []
    found = False
    for asset in assets:
        if asset.name == asset_name:
            found = True
            asset = asset.model_copy(
                update={
                    "amount": asset.amount + amount,
                    "avg_buy_price": weighted_average(asset.amount, asset.avg_buy_price, amount, total_value),
                    "current_price": price,
                }
            )
        result.append(asset)

    if not found:
        fields = {"name": asset_name, "amount": amount, "avg_buy_price": price, "current_price": price}
        if asset_id is not None:
            fields["id"] = asset_id
        result.append(Asset(**fields))
    return result


def apply_sell(
    assets: list[Asset],
    asset_name: str,
    amount: Decimal,
    price: Decimal,
    strict: bool = True,
) -> tuple[list[Asset], Decimal]:
    """
    Remove units of asset_name from an asset list.

    Args:
        assets: Current holdings
        asset_name: Instrument sold
        amount: Units sold
        price: Sale price per unit
        strict: Reject missing/insufficient holdings. When False (replay of
            possibly inconsistent history), a missing asset is a no-op and an
            oversell closes the asset.

    Returns:
        (new asset list, realized P&L excluding fee)

    Raises:
        InsufficientHoldingsError: strict and holdings are missing or too small
    """
    asset = next((a for a in assets if a.name == asset_name), None)
    held = asset.amount if asset is not None else Decimal("0")
    if asset is None or held < amount:
        if strict:
            raise InsufficientHoldingsError(asset_name, amount, held)
        if asset is None:
            return list(assets), Decimal("0")
        amount = held

    realized_pnl = (price - asset.avg_buy_price) * amount
    remaining = asset.amount - amount

    result = []
    for a in assets:
        if a.name == asset_name:
            if is_zero(remaining):
                continue
            a = a.model_copy(update={"amount": remaining, "current_price": price})
        result.append(a)
    return result, realized_pnl


def execute_trade(
    state: AppState,
    portfolio_id: str,
    intent: TradeIntent,
    timestamp: datetime,
    trade_id: str | None = None,
) -> TradeResult:
    """
    Apply a trade to the account.

    On any rejection the exception is raised before a new state exists, so
    the caller's snapshot is untouched.

    Args:
        state: Current account snapshot
        portfolio_id: Portfolio receiving the trade
        intent: Validated trade request
        timestamp: Trade time (also stamps the net-worth snapshot)
        trade_id: Ledger id (generated if None)

    Returns:
        TradeResult with the next snapshot and the new ledger entry

    Raises:
        PortfolioNotFoundError: Unknown portfolio
        InsufficientFundsError: Buy costs more than available cash
        InsufficientHoldingsError: Sell exceeds held amount
    """
    portfolio = tree.require(state.root_portfolios, portfolio_id)
    trade_fields = {
        "portfolio_id": portfolio_id,
        "trade_type": intent.trade_type,
        "asset_name": intent.asset_name,
        "amount": intent.amount,
        "price": intent.price,
        "total_value": intent.total_value,
        "fee": intent.fee,
        "timestamp": timestamp,
    }
    if trade_id is not None:
        trade_fields["id"] = trade_id

    if intent.trade_type == TradeType.BUY:
        required = intent.total_value + intent.fee
        if required > state.cash:
            raise InsufficientFundsError(required, state.cash)

        assets = apply_buy(portfolio.assets, intent.asset_name, intent.amount, intent.price, intent.total_value)
        trade = Trade(**trade_fields)
        cash = state.cash - required
        roots = tree.replace(state.root_portfolios, portfolio.model_copy(update={"assets": assets}))
    else:
        assets, realized_pnl = apply_sell(portfolio.assets, intent.asset_name, intent.amount, intent.price)
        trade = Trade(**trade_fields, realized_pnl=realized_pnl)
        cash = state.cash + intent.total_value - intent.fee
        roots = tree.replace(state.root_portfolios, portfolio.model_copy(update={"assets": assets}))
        roots = propagate_pnl(roots, portfolio_id, realized_pnl - intent.fee)

    next_state = state.model_copy(
        update={
            "cash": cash,
            "root_portfolios": roots,
            "trade_history": [trade, *state.trade_history],
        }
    )
    return TradeResult(state=net_worth.record(next_state, timestamp), trade=trade)
