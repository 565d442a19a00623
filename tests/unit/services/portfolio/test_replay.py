"""Unit tests for the replay/undo engine."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tradersim.services.portfolio import tree
from tradersim.services.portfolio.exceptions import TradeNotFoundError
from tradersim.services.portfolio.executor import execute_trade
from tradersim.services.portfolio.models import AppState, Portfolio, Trade, TradeIntent
from tradersim.services.portfolio.replay import delete_trade, replay_portfolio_assets

START = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def intent(trade_type: str, asset: str, amount: str, price: str, fee: str = "0") -> TradeIntent:
    return TradeIntent(type=trade_type, asset_name=asset, amount=Decimal(amount), price=Decimal(price), fee=Decimal(fee))


def run(state: AppState, steps: list[tuple[str, TradeIntent]]) -> tuple[AppState, list[Trade]]:
    trades = []
    for i, (portfolio_id, trade_intent) in enumerate(steps):
        result = execute_trade(state, portfolio_id, trade_intent, START + timedelta(minutes=i), trade_id=f"tr-{i + 1}")
        state = result.state
        trades.append(result.trade)
    return state, trades


@pytest.fixture
def state(tree_portfolios: list[Portfolio]) -> AppState:
    return AppState(cash=Decimal("1000000"), root_portfolios=tree_portfolios)


class TestReplayDeterminism:
    """Replaying the ledger reproduces incremental execution."""

    def test_replay_matches_incremental_state(self, state: AppState) -> None:
        state, _ = run(
            state,
            [
                ("c", intent("buy", "BTC", "2", "100")),
                ("c", intent("buy", "ETH", "5", "10")),
                ("c", intent("buy", "BTC", "1", "130")),
                ("au", intent("buy", "Coin", "3", "50")),
                ("c", intent("sell", "ETH", "5", "12")),
                ("c", intent("sell", "BTC", "1.5", "140")),
            ],
        )
        incremental = tree.find(state.root_portfolios, "c").assets

        replayed = replay_portfolio_assets("c", state.trade_history, existing_assets=incremental)

        assert replayed == incremental

    def test_replay_ignores_other_portfolios(self, state: AppState) -> None:
        state, _ = run(state, [("au", intent("buy", "Coin", "3", "50"))])

        assert replay_portfolio_assets("c", state.trade_history) == []

    def test_replay_skips_sell_without_holding(self) -> None:
        orphan_sell = Trade(
            id="tr-x",
            portfolio_id="c",
            type="sell",
            asset_name="BTC",
            amount=Decimal("1"),
            price=Decimal("10"),
            total_value=Decimal("10"),
            timestamp=START,
            realized_pnl=Decimal("0"),
        )

        assert replay_portfolio_assets("c", [orphan_sell]) == []


class TestDeleteTrade:
    """Deleting ledger entries."""

    def test_delete_buy_restores_cash_and_holdings(self, state: AppState) -> None:
        state, trades = run(
            state,
            [
                ("c", intent("buy", "BTC", "2", "100", fee="4")),
                ("c", intent("buy", "BTC", "2", "200", fee="8")),
            ],
        )

        after = delete_trade(state, trades[1].id, START + timedelta(hours=1))

        asset = tree.find(after.root_portfolios, "c").get_asset("BTC")
        assert after.cash == state.cash + Decimal("408")
        assert asset.amount == Decimal("2")
        assert asset.avg_buy_price == Decimal("100")
        assert asset.id == tree.find(state.root_portfolios, "c").get_asset("BTC").id
        assert [t.id for t in after.trade_history] == [trades[0].id]
        assert len(after.net_worth_history) == len(state.net_worth_history) + 1

    def test_delete_only_buy_removes_asset(self, state: AppState) -> None:
        state, trades = run(state, [("au", intent("buy", "Coin", "1", "50"))])

        after = delete_trade(state, trades[0].id, START)

        assert tree.find(after.root_portfolios, "au").assets == []
        assert after.cash == Decimal("1000000")

    def test_delete_sell_reverses_cash_and_pnl(self, state: AppState) -> None:
        state, trades = run(
            state,
            [
                ("c", intent("buy", "BTC", "10", "100")),
                ("c", intent("sell", "BTC", "4", "150", fee="10")),
            ],
        )
        assert tree.find(state.root_portfolios, "g").allocation == Decimal("400190")

        after = delete_trade(state, trades[1].id, START + timedelta(hours=1))

        assert after.cash == state.cash - Decimal("590")
        assert tree.find(after.root_portfolios, "c").get_asset("BTC").amount == Decimal("10")
        assert tree.find(after.root_portfolios, "c").allocation == Decimal("100000")
        assert tree.find(after.root_portfolios, "g").allocation == Decimal("400000")

    def test_delete_buy_with_later_sell_is_tolerated(self, state: AppState) -> None:
        state, trades = run(
            state,
            [
                ("c", intent("buy", "BTC", "1", "100")),
                ("c", intent("buy", "BTC", "1", "100")),
                ("c", intent("sell", "BTC", "2", "120")),
            ],
        )

        after = delete_trade(state, trades[0].id, START + timedelta(hours=1))

        # Remaining buy 1, sell 2 is clamped: asset closed, no error
        assert tree.find(after.root_portfolios, "c").assets == []
        assert len(after.trade_history) == 2

    def test_delete_trade_of_deleted_portfolio(self, state: AppState) -> None:
        state, trades = run(state, [("au", intent("buy", "Coin", "1", "50"))])
        state = state.model_copy(update={"root_portfolios": tree.delete(state.root_portfolios, "au")})

        after = delete_trade(state, trades[0].id, START)

        assert after.cash == Decimal("1000000")
        assert after.trade_history == []

    def test_unknown_trade(self, state: AppState) -> None:
        with pytest.raises(TradeNotFoundError, match="tr-missing"):
            delete_trade(state, "tr-missing", START)
