"""Net-worth recorder.

Appends one snapshot per state-changing operation. No deduplication or
compaction: the series grows with the number of events, not with time.
"""

from datetime import datetime

from tradersim.services.portfolio.cost_basis import net_worth
from tradersim.services.portfolio.models import AppState, NetWorthSnapshot


def snapshot(state: AppState, now: datetime) -> NetWorthSnapshot:
    """Net worth of the given state, stamped with now."""
    return NetWorthSnapshot(date=now, value=net_worth(state.cash, state.root_portfolios))


def record(state: AppState, now: datetime) -> AppState:
    """Return state with a new net-worth snapshot appended."""
    return state.model_copy(update={"net_worth_history": [*state.net_worth_history, snapshot(state, now)]})


def seed_history(state: AppState, now: datetime) -> AppState:
    """Replace the history with a single point for the current state."""
    return state.model_copy(update={"net_worth_history": [snapshot(state, now)]})
