"""Commands __init__ - exports all commands and command groups."""

from tradersim.cli.commands.account import (
    deposit_command,
    init_command,
    networth_command,
    summary_command,
    tether_command,
    withdraw_command,
)
from tradersim.cli.commands.portfolio import portfolio_group
from tradersim.cli.commands.trading import (
    delete_trade_command,
    history_command,
    positions_command,
    price_command,
    trade_command,
)

__all__ = [
    "init_command",
    "deposit_command",
    "withdraw_command",
    "tether_command",
    "summary_command",
    "networth_command",
    "portfolio_group",
    "trade_command",
    "history_command",
    "delete_trade_command",
    "price_command",
    "positions_command",
]
