"""Account dashboard aggregates.

Summaries for one portfolio subtree or for all roots, plus per-root
breakdowns of allocation and total P&L.
"""

from decimal import Decimal

from tradersim.services.portfolio import tree
from tradersim.services.portfolio.cost_basis import aggregate_cost, aggregate_value, asset_cost, net_worth
from tradersim.services.portfolio.exceptions import PortfolioNotFoundError
from tradersim.services.portfolio.models import (
    ALL_PORTFOLIOS_ID,
    AppState,
    Asset,
    Portfolio,
    PortfolioSummary,
    Trade,
)

_HUNDRED = Decimal("100")


def _realized(trades: list[Trade]) -> Decimal:
    return sum((t.realized_pnl or Decimal("0") for t in trades), Decimal("0"))


def _pct(part: Decimal, whole: Decimal) -> Decimal:
    return part / whole * _HUNDRED if whole > 0 else Decimal("0")


def trades_in_scope(state: AppState, node: Portfolio) -> list[Trade]:
    """Ledger entries of a portfolio and its descendants, newest first."""
    scope = tree.all_ids(node)
    return [t for t in state.trade_history if t.portfolio_id in scope]


def summarize(state: AppState, portfolio_id: str = ALL_PORTFOLIOS_ID) -> PortfolioSummary:
    """
    Aggregate value, cost and P&L for a selection.

    For ALL_PORTFOLIOS_ID the allocation is the sum of root allocations and
    the whole ledger is in scope; otherwise the selected subtree is used.

    Raises:
        PortfolioNotFoundError: Unknown portfolio id
    """
    if portfolio_id == ALL_PORTFOLIOS_ID:
        nodes = state.root_portfolios
        allocation = sum((p.allocation for p in nodes), Decimal("0"))
        trades = list(state.trade_history)
    else:
        node = tree.find(state.root_portfolios, portfolio_id)
        if node is None:
            raise PortfolioNotFoundError(portfolio_id)
        nodes = [node]
        allocation = node.allocation
        trades = trades_in_scope(state, node)

    assets: list[Asset] = [a for p in tree.flatten(nodes) for a in p.assets]
    value = sum((aggregate_value(p) for p in nodes), Decimal("0"))
    cost = sum((asset_cost(a) for a in assets), Decimal("0"))
    unrealized = value - cost
    realized = _realized(trades)

    return PortfolioSummary(
        portfolio_id=portfolio_id,
        allocation=allocation,
        total_value=value,
        total_cost=cost,
        unrealized_pnl=unrealized,
        unrealized_pnl_pct=_pct(unrealized, cost),
        realized_pnl=realized,
        total_pnl=realized + unrealized,
        allocation_pct=_pct(allocation, net_worth(state.cash, state.root_portfolios)),
        assets=assets,
        trades=trades,
    )


def root_pnl_breakdown(state: AppState) -> dict[str, Decimal]:
    """Per root: realized P&L of its subtree plus unrealized (value - cost)."""
    return {
        root.id: _realized(trades_in_scope(state, root)) + aggregate_value(root) - aggregate_cost(root)
        for root in state.root_portfolios
    }


def allocation_breakdown(state: AppState) -> dict[str, Decimal]:
    """Per root allocation, in tree order."""
    return {root.id: root.allocation for root in state.root_portfolios}
