"""Portfolio tree operations.

All functions are pure: they take a list of root portfolios and return a new
list, sharing untouched nodes. Nodes are matched by id.
"""

from decimal import Decimal

from tradersim.services.portfolio.cost_basis import aggregate_cost, aggregate_value
from tradersim.services.portfolio.exceptions import AllocationExceededError, PortfolioNotFoundError
from tradersim.services.portfolio.models import Portfolio

__all__ = [
    "aggregate_cost",
    "aggregate_value",
    "all_ids",
    "ancestor_path",
    "delete",
    "edit",
    "find",
    "flatten",
    "insert",
    "replace",
    "require",
    "validate_new_allocation",
]


def find(portfolios: list[Portfolio], portfolio_id: str) -> Portfolio | None:
    """Depth-first search by id."""
    for p in portfolios:
        if p.id == portfolio_id:
            return p
        found = find(p.children, portfolio_id)
        if found is not None:
            return found
    return None


def require(portfolios: list[Portfolio], portfolio_id: str) -> Portfolio:
    """Like find(), but raises PortfolioNotFoundError."""
    node = find(portfolios, portfolio_id)
    if node is None:
        raise PortfolioNotFoundError(portfolio_id)
    return node


def ancestor_path(portfolios: list[Portfolio], portfolio_id: str) -> list[str]:
    """
    Ids from the root down to the target (inclusive).

    Returns:
        [root_id, ..., portfolio_id], or [] when not found
    """
    for p in portfolios:
        if p.id == portfolio_id:
            return [p.id]
        sub_path = ancestor_path(p.children, portfolio_id)
        if sub_path:
            return [p.id, *sub_path]
    return []


def insert(portfolios: list[Portfolio], parent_id: str | None, new_portfolio: Portfolio) -> list[Portfolio]:
    """
    Append a portfolio under parent_id, or as a new root when parent_id is None.

    Raises:
        PortfolioNotFoundError: If parent_id is not in the tree
    """
    if parent_id is None:
        return [*portfolios, new_portfolio]
    require(portfolios, parent_id)
    return _insert_child(portfolios, parent_id, new_portfolio)


def _insert_child(portfolios: list[Portfolio], parent_id: str, new_portfolio: Portfolio) -> list[Portfolio]:
    result = []
    for p in portfolios:
        if p.id == parent_id:
            p = p.model_copy(update={"children": [*p.children, new_portfolio]})
        elif p.children:
            p = p.model_copy(update={"children": _insert_child(p.children, parent_id, new_portfolio)})
        result.append(p)
    return result


def validate_new_allocation(
    portfolios: list[Portfolio],
    parent_id: str | None,
    allocation: Decimal,
    net_worth: Decimal,
) -> None:
    """
    Creation-time budget check.

    Sibling allocations plus the new one must not exceed the parent's
    allocation, or the account net worth for roots. Not re-checked later:
    allocations drift with realized P&L.

    Raises:
        AllocationExceededError: If the budget would be exceeded
        PortfolioNotFoundError: If parent_id is not in the tree
    """
    if parent_id is None:
        siblings, limit = portfolios, net_worth
    else:
        parent = require(portfolios, parent_id)
        siblings, limit = parent.children, parent.allocation

    requested_total = sum((p.allocation for p in siblings), Decimal("0")) + allocation
    if requested_total > limit:
        raise AllocationExceededError(requested_total, limit)


def replace(portfolios: list[Portfolio], updated: Portfolio) -> list[Portfolio]:
    """Swap in an updated node (matched by id), keeping every other node."""
    result = []
    for p in portfolios:
        if p.id == updated.id:
            p = updated
        elif p.children:
            p = p.model_copy(update={"children": replace(p.children, updated)})
        result.append(p)
    return result


def edit(portfolios: list[Portfolio], portfolio_id: str, name: str, allocation: Decimal) -> list[Portfolio]:
    """Rename/rebudget a node. Children budgets are not re-validated."""
    node = require(portfolios, portfolio_id)
    return replace(portfolios, node.model_copy(update={"name": name, "allocation": allocation}))


def delete(portfolios: list[Portfolio], portfolio_id: str) -> list[Portfolio]:
    """Remove a node and its whole subtree."""
    return [
        p.model_copy(update={"children": delete(p.children, portfolio_id)}) if p.children else p
        for p in portfolios
        if p.id != portfolio_id
    ]


def all_ids(node: Portfolio) -> set[str]:
    """Ids of a node and all its descendants."""
    ids = {node.id}
    for child in node.children:
        ids |= all_ids(child)
    return ids


def flatten(portfolios: list[Portfolio]) -> list[Portfolio]:
    """Pre-order list of every node."""
    flat: list[Portfolio] = []
    for p in portfolios:
        flat.append(p)
        flat.extend(flatten(p.children))
    return flat
