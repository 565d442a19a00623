"""Unit tests for position reconstruction."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from tradersim.services.portfolio.models import AppState, Portfolio, PositionStatus, Trade
from tradersim.services.portfolio.positions import (
    PositionReconstructor,
    positions_for_portfolio,
    reconstruct_positions,
)

START = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


def make_trade(
    trade_id: str,
    trade_type: str,
    amount: str,
    price: str,
    days: float = 0,
    fee: str = "0",
    asset: str = "BTC",
    portfolio_id: str = "c",
) -> Trade:
    amount_d, price_d = Decimal(amount), Decimal(price)
    return Trade(
        id=trade_id,
        portfolio_id=portfolio_id,
        type=trade_type,
        asset_name=asset,
        amount=amount_d,
        price=price_d,
        total_value=amount_d * price_d,
        fee=Decimal(fee),
        timestamp=START + timedelta(days=days),
    )


def newest_first(*trades: Trade) -> list[Trade]:
    return list(reversed(trades))


class TestLifecycle:
    """Open, re-average, close, reopen."""

    def test_open_position(self) -> None:
        positions = reconstruct_positions(
            newest_first(make_trade("t1", "buy", "2", "100"), make_trade("t2", "buy", "2", "200", days=1)),
            now=START + timedelta(days=3),
        )

        assert len(positions) == 1
        position = positions[0]
        assert position.id == "pos-t1"
        assert position.status == PositionStatus.OPEN
        assert position.total_buy_amount == Decimal("4")
        assert position.remaining_amount == Decimal("4")
        assert position.avg_buy_price == Decimal("150")
        assert position.total_cost == Decimal("600")
        assert position.end_date is None
        assert position.last_update_date == START + timedelta(days=1)
        assert position.duration_days == 3

    def test_close_position_accumulates_net_pnl(self) -> None:
        positions = reconstruct_positions(
            newest_first(
                make_trade("t1", "buy", "4", "100"),
                make_trade("t2", "sell", "1", "150", days=1, fee="5"),
                make_trade("t3", "sell", "3", "90", days=2, fee="3"),
            ),
            now=START + timedelta(days=10),
        )

        position = positions[0]
        assert position.status == PositionStatus.CLOSED
        # (150-100)*1 - 5 + (90-100)*3 - 3
        assert position.realized_pnl == Decimal("12")
        assert position.remaining_amount == Decimal("0")
        assert position.end_date == START + timedelta(days=2)
        assert position.duration_days == 2
        assert [t.id for t in position.trades] == ["t1", "t2", "t3"]

    def test_buy_after_close_opens_new_position(self) -> None:
        positions = reconstruct_positions(
            newest_first(
                make_trade("t1", "buy", "1", "100"),
                make_trade("t2", "sell", "1", "120", days=1),
                make_trade("t3", "buy", "1", "130", days=2),
            ),
            now=START + timedelta(days=3),
        )

        assert [p.id for p in positions] == ["pos-t3", "pos-t1"]
        assert positions[0].status == PositionStatus.OPEN
        assert positions[0].avg_buy_price == Decimal("130")
        assert positions[1].status == PositionStatus.CLOSED

    def test_partial_duration_rounds_up(self) -> None:
        positions = reconstruct_positions(
            [make_trade("t1", "buy", "1", "100")],
            now=START + timedelta(hours=1),
        )

        assert positions[0].duration_days == 1

    def test_sell_without_open_position_is_ignored(self) -> None:
        positions = reconstruct_positions([make_trade("t1", "sell", "1", "100")], now=START)

        assert positions == []

    def test_positions_keyed_by_portfolio_and_asset(self) -> None:
        positions = reconstruct_positions(
            newest_first(
                make_trade("t1", "buy", "1", "100", portfolio_id="c"),
                make_trade("t2", "buy", "1", "100", portfolio_id="au"),
                make_trade("t3", "buy", "1", "100", asset="ETH", days=1),
            ),
            now=START + timedelta(days=2),
        )

        assert {(p.portfolio_id, p.asset_name) for p in positions} == {("c", "BTC"), ("au", "BTC"), ("c", "ETH")}


class TestReconstructor:
    """Incremental API."""

    def test_apply_then_finish(self) -> None:
        reconstructor = PositionReconstructor()
        reconstructor.apply(make_trade("t1", "buy", "1", "100"))

        positions = reconstructor.finish(START + timedelta(days=5))

        assert positions[0].duration_days == 5


class TestPortfolioScope:
    """Positions filtered by a portfolio subtree."""

    def test_subtree_filter(self, tree_portfolios: list[Portfolio]) -> None:
        state = AppState(
            cash=Decimal("0"),
            root_portfolios=tree_portfolios,
            trade_history=newest_first(
                make_trade("t1", "buy", "1", "100", portfolio_id="c"),
                make_trade("t2", "buy", "1", "100", portfolio_id="au"),
            ),
        )

        assert [p.portfolio_id for p in positions_for_portfolio(state, "g", now=START)] == ["c"]
        assert len(positions_for_portfolio(state, now=START)) == 2
        assert positions_for_portfolio(state, "nope", now=START) == []
