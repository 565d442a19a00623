"""Cost-basis engine.

Pure functions over assets and portfolio subtrees:
- weighted-average buy price
- market value and cost basis of an asset or subtree
- net worth (cash + market value of every root)
"""

from decimal import Decimal
from typing import Iterable

from tradersim.services.portfolio.models import EPSILON, Asset, Portfolio


def is_zero(amount: Decimal) -> bool:
    """True when amount is at or below EPSILON (effectively nothing held)."""
    return amount <= EPSILON


def weighted_average(
    old_amount: Decimal,
    old_avg_price: Decimal,
    added_amount: Decimal,
    added_value: Decimal,
) -> Decimal:
    """
    Weighted-average unit cost after adding units.

    (old_amount * old_avg_price + added_value) / (old_amount + added_amount)

    Args:
        old_amount: Units held before the buy
        old_avg_price: Average cost of those units
        added_amount: Units bought
        added_value: Total paid for the added units (fee excluded)

    Returns:
        New average cost per unit

    Raises:
        ValueError: If the resulting amount is not positive
    """
    new_amount = old_amount + added_amount
    if new_amount <= 0:
        raise ValueError(f"Resulting amount must be positive, got {new_amount}")
    return (old_amount * old_avg_price + added_value) / new_amount


def asset_value(asset: Asset) -> Decimal:
    """Market value: amount * current_price."""
    return asset.amount * asset.current_price


def asset_cost(asset: Asset) -> Decimal:
    """Cost basis: amount * avg_buy_price."""
    return asset.amount * asset.avg_buy_price


def asset_unrealized_pnl(asset: Asset) -> Decimal:
    """Market value minus cost basis."""
    return asset_value(asset) - asset_cost(asset)


def aggregate_value(node: Portfolio) -> Decimal:
    """Market value of a portfolio's own assets plus all descendants."""
    own = sum((asset_value(a) for a in node.assets), Decimal("0"))
    return own + sum((aggregate_value(child) for child in node.children), Decimal("0"))


def aggregate_cost(node: Portfolio) -> Decimal:
    """Cost basis of a portfolio's own assets plus all descendants."""
    own = sum((asset_cost(a) for a in node.assets), Decimal("0"))
    return own + sum((aggregate_cost(child) for child in node.children), Decimal("0"))


def total_value(portfolios: Iterable[Portfolio]) -> Decimal:
    """Market value across a forest of portfolios."""
    return sum((aggregate_value(p) for p in portfolios), Decimal("0"))


def total_cost(portfolios: Iterable[Portfolio]) -> Decimal:
    """Cost basis across a forest of portfolios."""
    return sum((aggregate_cost(p) for p in portfolios), Decimal("0"))


def net_worth(cash: Decimal, portfolios: Iterable[Portfolio]) -> Decimal:
    """Cash plus market value of every root."""
    return cash + total_value(portfolios)
