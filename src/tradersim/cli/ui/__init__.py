"""CLI UI components - rich formatters."""

from tradersim.cli.ui.formatters import (
    create_breakdown_table,
    create_history_table,
    create_networth_table,
    create_portfolio_tree,
    create_positions_table,
    create_summary_table,
    format_money,
    format_pnl,
)

__all__ = [
    "create_breakdown_table",
    "create_history_table",
    "create_networth_table",
    "create_portfolio_tree",
    "create_positions_table",
    "create_summary_table",
    "format_money",
    "format_pnl",
]
