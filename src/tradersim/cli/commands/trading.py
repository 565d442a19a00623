"""Trading commands - trade, history, delete-trade, price and positions."""

from decimal import Decimal

import click

from tradersim.cli.params import DECIMAL
from tradersim.cli.session import console, fail, ledger_session, pass_config
from tradersim.cli.ui import create_history_table, create_positions_table, format_money, format_pnl
from tradersim.services.execution import FeeConfig, TradeTicket, sell_all
from tradersim.services.portfolio import ALL_PORTFOLIOS_ID, PositionStatus, TradeType
from tradersim.services.portfolio.analytics import trades_in_scope
from tradersim.system.config import SystemConfig


@click.command("trade")
@click.argument("portfolio_id")
@click.argument("side", type=click.Choice(["buy", "sell"], case_sensitive=False))
@click.argument("asset_name")
@click.option("--price", type=DECIMAL, default=None, help="Price per unit (required unless --all)")
@click.option("--amount", type=DECIMAL, default=None, help="Units to trade")
@click.option("--total", type=DECIMAL, default=None, help="Trade total (amount is derived)")
@click.option(
    "--currency",
    type=click.Choice(["toman", "tether"]),
    default="toman",
    show_default=True,
    help="Currency of price and total",
)
@click.option(
    "--fee-type",
    type=click.Choice(["percentage", "fixed"]),
    default="percentage",
    show_default=True,
)
@click.option("--fee", "fee_value", type=DECIMAL, default=Decimal("0.2"), show_default=True, help="Fee percent or amount")
@click.option("--all", "sell_everything", is_flag=True, help="Sell the whole holding")
@pass_config
def trade_command(
    config: SystemConfig,
    portfolio_id: str,
    side: str,
    asset_name: str,
    price: Decimal | None,
    amount: Decimal | None,
    total: Decimal | None,
    currency: str,
    fee_type: str,
    fee_value: Decimal,
    sell_everything: bool,
):
    """
    Buy or sell an asset inside a portfolio.

    Example:
        tradersim trade p-1 buy Gold --price 3500000 --amount 2
        tradersim trade p-1 buy Bitcoin --price 65000 --total 1000 --currency tether
        tradersim trade p-1 sell Gold --all --price 3600000
    """
    trade_type = TradeType(side.lower())

    with ledger_session(config) as ledger:
        fee = FeeConfig(fee_type=fee_type, value=fee_value)  # type: ignore[arg-type]
        if sell_everything:
            if trade_type != TradeType.SELL:
                fail("--all can only be used with sell")
            asset = ledger.get_portfolio(portfolio_id).get_asset(asset_name)
            if asset is None:
                fail(f"'{asset_name}' is not held in portfolio {portfolio_id}")
            ticket = sell_all(asset, price=price, currency=currency, fee=fee)  # type: ignore[arg-type]
        else:
            if price is None:
                fail("--price is required")
            ticket = TradeTicket(
                trade_type=trade_type,
                asset_name=asset_name,
                price=price,
                amount=amount,
                total=total,
                currency=currency,  # type: ignore[arg-type]
                fee=fee,
            )

        trade = ledger.trade(portfolio_id, ticket.to_intent(ledger.state.tether_price))

        console.print(
            f"[green]✓ {trade.trade_type.value.upper()} {trade.amount} {trade.asset_name} "
            f"@ {format_money(trade.price)}[/green] [dim]({trade.id})[/dim]"
        )
        console.print(f"  Total: {format_money(trade.total_value)}  Fee: {format_money(trade.fee)}")
        if trade.realized_pnl is not None:
            console.print(f"  Realized P&L: {format_pnl(trade.realized_pnl)}")
        console.print(f"  Cash: {format_money(ledger.state.cash)}")


@click.command("history")
@click.option("--portfolio", "-p", "portfolio_id", default=ALL_PORTFOLIOS_ID, help="Portfolio id (default: all)")
@click.option("--limit", "-n", type=int, default=20, show_default=True, help="Number of trades to show")
@pass_config
def history_command(config: SystemConfig, portfolio_id: str, limit: int):
    """Show the trade ledger, newest first."""
    with ledger_session(config) as ledger:
        if portfolio_id == ALL_PORTFOLIOS_ID:
            trades = ledger.state.trade_history
        else:
            trades = trades_in_scope(ledger.state, ledger.get_portfolio(portfolio_id))

        if not trades:
            console.print("[yellow]No trades recorded[/yellow]")
            return
        console.print(create_history_table(trades[:limit]))


@click.command("delete-trade")
@click.argument("trade_id")
@pass_config
def delete_trade_command(config: SystemConfig, trade_id: str):
    """Delete a trade and rebuild its portfolio from the remaining ledger."""
    with ledger_session(config) as ledger:
        ledger.delete_trade(trade_id)
        console.print(f"[green]Deleted trade {trade_id}[/green]  cash {format_money(ledger.state.cash)}")


@click.command("price")
@click.argument("asset_id")
@click.argument("price", type=DECIMAL)
@click.option("--portfolio", "-p", "portfolio_id", default=None, help="Only search this portfolio")
@pass_config
def price_command(config: SystemConfig, asset_id: str, price: Decimal, portfolio_id: str | None):
    """Set an asset's current market price."""
    with ledger_session(config) as ledger:
        ledger.update_asset_price(asset_id, price, portfolio_id)
        console.print(f"[green]Price of {asset_id} set to {format_money(price)}[/green]")


@click.command("positions")
@click.option("--portfolio", "-p", "portfolio_id", default=ALL_PORTFOLIOS_ID, help="Portfolio id (default: all)")
@click.option("--open", "open_only", is_flag=True, help="Only open positions")
@pass_config
def positions_command(config: SystemConfig, portfolio_id: str, open_only: bool):
    """Show positions reconstructed from the ledger."""
    with ledger_session(config) as ledger:
        positions = ledger.positions(portfolio_id)
        if open_only:
            positions = [p for p in positions if p.status == PositionStatus.OPEN]

        if not positions:
            console.print("[yellow]No positions[/yellow]")
            return
        console.print(create_positions_table(positions))
