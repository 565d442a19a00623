"""Replay/undo engine.

When a historical trade is deleted, the affected portfolio's assets are
rebuilt from scratch by replaying its surviving trades in ascending time
order, so asset state is always a pure function of the ledger.

Cash is reconciled by reversing only the deleted trade's direct effect (not
a full cash replay): deposits and withdrawals made since are not replayed.
A deleted sell also withdraws the net P&L it propagated into the
portfolio's allocation and its ancestors'.
"""

from datetime import datetime

from tradersim.services.portfolio import net_worth, tree
from tradersim.services.portfolio.exceptions import TradeNotFoundError
from tradersim.services.portfolio.executor import apply_buy, apply_sell
from tradersim.services.portfolio.models import AppState, Asset, Trade, TradeType, chronological
from tradersim.services.portfolio.pnl import net_pnl, propagate_pnl
from tradersim.system import LoggerFactory

logger = LoggerFactory.get_logger()


def replay_portfolio_assets(
    portfolio_id: str,
    trades: list[Trade],
    existing_assets: list[Asset] | None = None,
) -> list[Asset]:
    """
    Rebuild one portfolio's holdings from the ledger.

    Starts from an empty asset list and applies every trade of portfolio_id
    with the executor's buy/sell rules. Sells of assets not held are skipped;
    oversells close the asset.

    Args:
        portfolio_id: Portfolio to rebuild
        trades: Ledger (any order; sorted here)
        existing_assets: Current holdings, only used to keep asset ids stable

    Returns:
        Asset list as the incremental executor would have produced it
    """
    ids = {a.name: a.id for a in existing_assets or []}
    assets: list[Asset] = []

    for trade in chronological([t for t in trades if t.portfolio_id == portfolio_id]):
        if trade.trade_type == TradeType.BUY:
            assets = apply_buy(
                assets,
                trade.asset_name,
                trade.amount,
                trade.price,
                trade.total_value,
                asset_id=ids.get(trade.asset_name),
            )
            continue

        if not any(a.name == trade.asset_name for a in assets):
            logger.debug(
                "ledger.replay_sell_skipped",
                portfolio_id=portfolio_id,
                trade_id=trade.id,
                asset=trade.asset_name,
            )
            continue
        assets, _ = apply_sell(assets, trade.asset_name, trade.amount, trade.price, strict=False)

    return assets


def delete_trade(state: AppState, trade_id: str, now: datetime) -> AppState:
    """
    Remove a trade from the ledger and rebuild what depends on it.

    Steps:
    1. Drop the trade from the ledger
    2. Replay the trade's portfolio from the surviving ledger
    3. Reverse the trade's direct cash effect
    4. For a sell, subtract its net P&L from the portfolio and ancestors
    5. Record net worth

    Args:
        state: Current account snapshot
        trade_id: Ledger id to delete
        now: Time stamp for the net-worth snapshot

    Returns:
        Next account snapshot

    Raises:
        TradeNotFoundError: Unknown trade id
    """
    deleted = next((t for t in state.trade_history if t.id == trade_id), None)
    if deleted is None:
        raise TradeNotFoundError(trade_id)

    history = [t for t in state.trade_history if t.id != trade_id]

    if deleted.trade_type == TradeType.BUY:
        cash = state.cash + deleted.total_value + deleted.fee
    else:
        cash = state.cash - (deleted.total_value - deleted.fee)

    roots = state.root_portfolios
    portfolio = tree.find(roots, deleted.portfolio_id)
    if portfolio is None:
        logger.debug("ledger.delete_orphan_trade", trade_id=trade_id, portfolio_id=deleted.portfolio_id)
    else:
        assets = replay_portfolio_assets(portfolio.id, history, existing_assets=portfolio.assets)
        roots = tree.replace(roots, portfolio.model_copy(update={"assets": assets}))
        if deleted.is_sell:
            roots = propagate_pnl(roots, portfolio.id, -net_pnl(deleted))

    next_state = state.model_copy(update={"cash": cash, "root_portfolios": roots, "trade_history": history})
    return net_worth.record(next_state, now)
