"""Root conftest - shared clocks, id factories and ledger fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tradersim.services.portfolio import LedgerService, Portfolio
from tradersim.system import LoggerFactory, LoggingConfig


class FakeClock:
    """Deterministic clock: each call returns a time one minute after the previous one."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(minutes=1)) -> None:
        self.now = start or datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class SequentialIds:
    """Id factory producing p-1001, tr-1002, ... in call order."""

    def __init__(self) -> None:
        self.counter = 1000

    def __call__(self, prefix: str) -> str:
        self.counter += 1
        return f"{prefix}-{self.counter}"


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Console-only logging at WARNING for the test session."""
    LoggerFactory.configure(LoggingConfig(level="WARNING", enable_file=False))
    yield


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def tree_portfolios() -> list[Portfolio]:
    """Root "Growth" (id g) with child "Crypto" (id c), plus root "Gold" (id au)."""
    crypto = Portfolio(id="c", name="Crypto", allocation=Decimal("100000"))
    growth = Portfolio(id="g", name="Growth", allocation=Decimal("400000"), children=[crypto])
    gold = Portfolio(id="au", name="Gold", allocation=Decimal("200000"))
    return [growth, gold]


@pytest.fixture
def ledger(tree_portfolios: list[Portfolio], clock: FakeClock, ids: SequentialIds) -> LedgerService:
    """Account with 1,000,000 cash and the two-level tree."""
    return LedgerService.initialize(
        initial_cash=Decimal("1000000"),
        portfolios=tree_portfolios,
        clock=clock,
        id_factory=ids,
    )
