"""Rich table formatters for CLI output."""

from decimal import Decimal

from rich.table import Table
from rich.tree import Tree

from tradersim.services.portfolio import (
    AppState,
    NetWorthSnapshot,
    Portfolio,
    PortfolioSummary,
    PositionStatus,
    PositionView,
    Trade,
    TradeType,
)
from tradersim.services.portfolio import analytics
from tradersim.services.portfolio.cost_basis import aggregate_value


def format_money(value: Decimal) -> str:
    """Whole base-currency units with thousands separators."""
    return f"{value:,.0f}"


def format_amount(value: Decimal) -> str:
    return f"{value.normalize():f}"


def format_pnl(value: Decimal) -> str:
    """Signed, colored P&L."""
    color = "green" if value >= 0 else "red"
    return f"[{color}]{value:+,.0f}[/{color}]"


def _add_portfolio_node(parent: Tree, portfolio: Portfolio, selected_id: str | None) -> None:
    marker = " [yellow]*[/yellow]" if portfolio.id == selected_id else ""
    node = parent.add(
        f"[bold]{portfolio.name}[/bold] [dim]({portfolio.id})[/dim]{marker}  "
        f"allocation {format_money(portfolio.allocation)}  value {format_money(aggregate_value(portfolio))}"
    )
    for asset in portfolio.assets:
        node.add(
            f"[cyan]{asset.name}[/cyan] [dim]{asset.id}[/dim]  "
            f"{format_amount(asset.amount)} @ {format_money(asset.current_price)} "
            f"(avg {format_money(asset.avg_buy_price)})"
        )
    for child in portfolio.children:
        _add_portfolio_node(node, child, selected_id)


def create_portfolio_tree(state: AppState) -> Tree:
    """
    Create a Rich tree of the portfolio hierarchy with holdings.

    Args:
        state: Account snapshot

    Returns:
        Rich Tree rooted at the account
    """
    root = Tree(f"[bold cyan]Account[/bold cyan]  cash {format_money(state.cash)}")
    for portfolio in state.root_portfolios:
        _add_portfolio_node(root, portfolio, state.selected_portfolio_id)
    return root


def create_history_table(trades: list[Trade]) -> Table:
    """
    Create a Rich table of ledger entries (newest first).

    Args:
        trades: Ledger entries in display order

    Returns:
        Configured Rich Table with one row per trade
    """
    table = Table(title="Trade History", show_header=True, header_style="bold cyan")
    table.add_column("Trade", style="dim", no_wrap=True)
    table.add_column("Date", style="white")
    table.add_column("Portfolio", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Asset", style="magenta")
    table.add_column("Amount", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Fee", justify="right", style="yellow")
    table.add_column("Realized", justify="right")

    for trade in trades:
        side = "[green]BUY[/green]" if trade.trade_type == TradeType.BUY else "[red]SELL[/red]"
        realized = format_pnl(trade.realized_pnl) if trade.realized_pnl is not None else "-"
        table.add_row(
            trade.id,
            trade.timestamp.strftime("%Y-%m-%d %H:%M"),
            trade.portfolio_id,
            side,
            trade.asset_name,
            format_amount(trade.amount),
            format_money(trade.price),
            format_money(trade.total_value),
            format_money(trade.fee),
            realized,
        )
    return table


def create_positions_table(positions: list[PositionView]) -> Table:
    """Create a Rich table of reconstructed positions."""
    table = Table(title="Positions", show_header=True, header_style="bold cyan")
    table.add_column("Asset", style="magenta", no_wrap=True)
    table.add_column("Portfolio", style="cyan")
    table.add_column("Status")
    table.add_column("Bought", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Avg Price", justify="right")
    table.add_column("Realized", justify="right")
    table.add_column("Days", justify="right", style="dim")

    for position in positions:
        status = "[green]OPEN[/green]" if position.status == PositionStatus.OPEN else "[dim]CLOSED[/dim]"
        table.add_row(
            position.asset_name,
            position.portfolio_id,
            status,
            format_amount(position.total_buy_amount),
            format_amount(position.remaining_amount),
            format_money(position.avg_buy_price),
            format_pnl(position.realized_pnl),
            str(position.duration_days),
        )
    return table


def create_summary_table(summary: PortfolioSummary, cash: Decimal, net_worth: Decimal) -> Table:
    """
    Create a Rich key/value table for a portfolio summary.

    Args:
        summary: Aggregates for the selection
        cash: Account cash
        net_worth: Account net worth
    """
    table = Table(title=f"Summary - {summary.portfolio_id}", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Net Worth", format_money(net_worth))
    table.add_row("Cash", format_money(cash))
    table.add_row("Allocation", f"{format_money(summary.allocation)} ({summary.allocation_pct:.1f}%)")
    table.add_row("Market Value", format_money(summary.total_value))
    table.add_row("Cost Basis", format_money(summary.total_cost))
    table.add_row("Unrealized P&L", f"{format_pnl(summary.unrealized_pnl)} ({summary.unrealized_pnl_pct:.2f}%)")
    table.add_row("Realized P&L", format_pnl(summary.realized_pnl))
    table.add_row("Total P&L", format_pnl(summary.total_pnl), style="bold")
    return table


def create_breakdown_table(state: AppState) -> Table:
    """Create a Rich table of allocation and total P&L per root portfolio."""
    allocations = analytics.allocation_breakdown(state)
    pnl = analytics.root_pnl_breakdown(state)

    table = Table(title="Root Portfolios", show_header=True, header_style="bold cyan")
    table.add_column("Portfolio", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Allocation", justify="right")
    table.add_column("Total P&L", justify="right")

    for root in state.root_portfolios:
        table.add_row(root.id, root.name, format_money(allocations[root.id]), format_pnl(pnl[root.id]))
    return table


def create_networth_table(history: list[NetWorthSnapshot]) -> Table:
    """
    Create a Rich table of net-worth points with the change from the previous point.

    Args:
        history: Points in recording order (oldest first)
    """
    table = Table(title="Net Worth History", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="white")
    table.add_column("Net Worth", justify="right")
    table.add_column("Change", justify="right")

    previous: Decimal | None = None
    for point in history:
        change = format_pnl(point.value - previous) if previous is not None else "-"
        table.add_row(point.date.strftime("%Y-%m-%d %H:%M"), format_money(point.value), change)
        previous = point.value
    return table
