"""Realized P&L propagation into portfolio allocations.

A sell's net P&L (realized P&L minus fee) is added to the allocation of the
traded portfolio and, undivided, to every ancestor up to its root.
"""

from decimal import Decimal

from tradersim.services.portfolio.models import Portfolio, Trade


def net_pnl(trade: Trade) -> Decimal:
    """Realized P&L minus fee for sells; zero for buys."""
    if not trade.is_sell:
        return Decimal("0")
    return (trade.realized_pnl or Decimal("0")) - trade.fee


def propagate_pnl(portfolios: list[Portfolio], portfolio_id: str, delta: Decimal) -> list[Portfolio]:
    """
    Add delta to the allocation of portfolio_id and of each of its ancestors.

    Pass a negative delta to reverse an earlier propagation.

    Args:
        portfolios: Root portfolios
        portfolio_id: Portfolio that realized the P&L
        delta: Amount to add at every level of the path

    Returns:
        New root list (unchanged when portfolio_id is not in the tree)
    """
    updated, _ = _propagate(portfolios, portfolio_id, delta)
    return updated


def _propagate(portfolios: list[Portfolio], portfolio_id: str, delta: Decimal) -> tuple[list[Portfolio], bool]:
    found = False
    result = []
    for p in portfolios:
        if p.id == portfolio_id:
            found = True
            p = p.model_copy(update={"allocation": p.allocation + delta})
        elif p.children:
            children, child_found = _propagate(p.children, portfolio_id, delta)
            if child_found:
                found = True
                p = p.model_copy(update={"children": children, "allocation": p.allocation + delta})
        result.append(p)
    return result, found
