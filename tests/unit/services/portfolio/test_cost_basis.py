"""Unit tests for the cost-basis engine."""

from decimal import Decimal

import pytest

from tradersim.services.portfolio.cost_basis import (
    aggregate_cost,
    aggregate_value,
    asset_unrealized_pnl,
    is_zero,
    net_worth,
    weighted_average,
)
from tradersim.services.portfolio.models import Asset, Portfolio


def make_asset(name: str, amount: str, avg: str, current: str) -> Asset:
    return Asset(name=name, amount=Decimal(amount), avg_buy_price=Decimal(avg), current_price=Decimal(current))


class TestWeightedAverage:
    """Test weighted-average cost."""

    def test_first_buy(self) -> None:
        assert weighted_average(Decimal("0"), Decimal("0"), Decimal("10"), Decimal("1000")) == Decimal("100")

    def test_second_buy_reaverages(self) -> None:
        assert weighted_average(Decimal("10"), Decimal("100"), Decimal("10"), Decimal("2000")) == Decimal("150")

    def test_non_positive_result_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            weighted_average(Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"))


class TestAggregates:
    """Test value/cost roll-ups."""

    @pytest.fixture
    def growth(self) -> Portfolio:
        child = Portfolio(id="c", name="Crypto", assets=[make_asset("BTC", "2", "100", "150")])
        return Portfolio(id="g", name="Growth", assets=[make_asset("Gold", "1", "50", "40")], children=[child])

    def test_aggregate_value_includes_descendants(self, growth: Portfolio) -> None:
        assert aggregate_value(growth) == Decimal("340")

    def test_aggregate_cost_includes_descendants(self, growth: Portfolio) -> None:
        assert aggregate_cost(growth) == Decimal("250")

    def test_net_worth(self, growth: Portfolio) -> None:
        assert net_worth(Decimal("1000"), [growth]) == Decimal("1340")

    def test_unrealized(self) -> None:
        assert asset_unrealized_pnl(make_asset("Gold", "3", "10", "8")) == Decimal("-6")

    def test_empty_portfolio(self) -> None:
        assert aggregate_value(Portfolio(name="Empty")) == Decimal("0")


class TestEpsilon:
    """Test zero threshold."""

    def test_values_at_or_below_epsilon_are_zero(self) -> None:
        assert is_zero(Decimal("0"))
        assert is_zero(Decimal("0.000001"))
        assert not is_zero(Decimal("0.000002"))
