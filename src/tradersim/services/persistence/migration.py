"""Snapshot migration.

Older stored documents may lack fields added later. Migration fills them in
before the document is validated into an AppState:
- ``rootPortfolios`` / ``tradeHistory`` default to empty lists
- portfolios get empty ``assets`` / ``children`` lists when missing
- ``tetherPrice`` defaults to 60000, ``selectedPortfolioId`` to None
- a missing or non-list ``netWorthHistory`` is replaced by a single point
  computed from cash plus the market value of every asset
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from tradersim.services.persistence.interface import Snapshot
from tradersim.system import LoggerFactory

logger = LoggerFactory.get_logger()

DEFAULT_TETHER_PRICE = "60000"


def _normalize_portfolio(portfolio: dict[str, Any]) -> dict[str, Any]:
    return {
        **portfolio,
        "assets": list(portfolio.get("assets") or []),
        "children": [_normalize_portfolio(c) for c in portfolio.get("children") or []],
    }


def _assets_value(portfolios: list[dict[str, Any]]) -> Decimal:
    total = Decimal("0")
    for p in portfolios:
        for a in p["assets"]:
            total += Decimal(str(a.get("amount", 0))) * Decimal(str(a.get("currentPrice", 0)))
        total += _assets_value(p["children"])
    return total


def migrate_snapshot(data: Snapshot, now: datetime | None = None) -> Snapshot:
    """
    Bring a stored document up to the current shape.

    Args:
        data: Raw stored document (not modified)
        now: Date for a synthesized net-worth point (defaults to current UTC time)

    Returns:
        New document ready for AppState.from_snapshot()
    """
    migrated = dict(data)
    migrated["rootPortfolios"] = [_normalize_portfolio(p) for p in data.get("rootPortfolios") or []]
    migrated.setdefault("tradeHistory", [])
    if migrated["tradeHistory"] is None:
        migrated["tradeHistory"] = []
    migrated.setdefault("selectedPortfolioId", None)
    if migrated.get("tetherPrice") is None:
        migrated["tetherPrice"] = DEFAULT_TETHER_PRICE

    history = data.get("netWorthHistory")
    if not isinstance(history, list):
        cash = Decimal(str(data.get("cash", 0)))
        value = cash + _assets_value(migrated["rootPortfolios"])
        migrated["netWorthHistory"] = [
            {"date": (now or datetime.now(timezone.utc)).isoformat(), "value": str(value)}
        ]
        logger.info("persistence.history_synthesized", value=str(value))

    return migrated
