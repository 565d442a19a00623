"""Position reconstruction from the trade ledger.

Replays the ledger in ascending time order and groups trades into positions
per (portfolio_id, asset_name):
- A buy with no open position opens one
- Buys on an open position re-average its cost
- Sells accumulate net P&L; when the remaining amount reaches ~zero the
  position is CLOSED and a later buy opens a fresh one
- A sell with no open position is ignored (inconsistent history)
"""

import math
from datetime import datetime, timezone

from tradersim.services.portfolio import tree
from tradersim.services.portfolio.cost_basis import is_zero, weighted_average
from tradersim.services.portfolio.models import (
    ALL_PORTFOLIOS_ID,
    AppState,
    PositionStatus,
    PositionView,
    Trade,
    TradeType,
    chronological,
)
from tradersim.system import LoggerFactory

logger = LoggerFactory.get_logger()

_SECONDS_PER_DAY = 24 * 60 * 60

PositionKey = tuple[str, str]


class PositionReconstructor:
    """
    Incremental position builder.

    Feed trades in ascending time order with apply(), then call finish() to
    collect closed positions followed by those still open.

    Example:
        >>> reconstructor = PositionReconstructor()
        >>> for trade in chronological(ledger):
        ...     reconstructor.apply(trade)
        >>> positions = reconstructor.finish(now)
    """

    def __init__(self) -> None:
        """Initialize reconstructor."""
        self._open: dict[PositionKey, PositionView] = {}
        self._closed: list[PositionView] = []

    def apply(self, trade: Trade) -> None:
        """Fold one trade into the open-position map."""
        key = (trade.portfolio_id, trade.asset_name)
        position = self._open.get(key)

        if position is None:
            if trade.trade_type == TradeType.SELL:
                logger.debug("ledger.position_sell_without_open", trade_id=trade.id, asset=trade.asset_name)
                return
            position = PositionView(
                id=f"pos-{trade.id}",
                asset_name=trade.asset_name,
                portfolio_id=trade.portfolio_id,
                start_date=trade.timestamp,
            )
            self._open[key] = position

        position.trades.append(trade)
        position.last_update_date = trade.timestamp

        if trade.trade_type == TradeType.BUY:
            position.avg_buy_price = weighted_average(
                position.remaining_amount, position.avg_buy_price, trade.amount, trade.total_value
            )
            position.remaining_amount += trade.amount
            position.total_buy_amount += trade.amount
            position.total_cost += trade.total_value
            return

        cost_of_sold = trade.amount * position.avg_buy_price
        position.realized_pnl += trade.total_value - cost_of_sold - trade.fee
        position.remaining_amount -= trade.amount

        if is_zero(position.remaining_amount):
            position.status = PositionStatus.CLOSED
            position.end_date = trade.timestamp
            self._closed.append(position)
            del self._open[key]

    def finish(self, now: datetime) -> list[PositionView]:
        """
        Emit every position with its duration, newest start first.

        Args:
            now: End point for positions that are still open

        Returns:
            Closed and open positions sorted by start_date descending
        """
        positions = [*self._closed, *self._open.values()]
        for position in positions:
            end = position.end_date or now
            seconds = abs((end - position.start_date).total_seconds())
            position.duration_days = math.ceil(seconds / _SECONDS_PER_DAY)
        return sorted(positions, key=lambda p: p.start_date, reverse=True)


def reconstruct_positions(trades: list[Trade], now: datetime | None = None) -> list[PositionView]:
    """
    Derive positions from a ledger.

    Args:
        trades: Ledger in any order (sorted ascending by timestamp here)
        now: End point for open positions (defaults to current UTC time)

    Returns:
        Positions sorted newest start first
    """
    reconstructor = PositionReconstructor()
    for trade in chronological(trades):
        reconstructor.apply(trade)
    return reconstructor.finish(now or datetime.now(timezone.utc))


def positions_for_portfolio(
    state: AppState, portfolio_id: str = ALL_PORTFOLIOS_ID, now: datetime | None = None
) -> list[PositionView]:
    """
    Positions of a portfolio subtree, or of the whole account for ALL_PORTFOLIOS_ID.

    Unknown portfolio ids yield an empty list.
    """
    positions = reconstruct_positions(state.trade_history, now)
    if portfolio_id == ALL_PORTFOLIOS_ID:
        return positions

    node = tree.find(state.root_portfolios, portfolio_id)
    if node is None:
        return []
    scope = tree.all_ids(node)
    return [p for p in positions if p.portfolio_id in scope]
