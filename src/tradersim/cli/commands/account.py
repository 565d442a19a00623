"""Account commands - init, cash movements, tether rate and summary."""

from decimal import Decimal

import click

from tradersim.cli.params import DECIMAL
from tradersim.cli.session import build_synchronizer, console, fail, ledger_session, pass_config
from tradersim.cli.ui import (
    create_breakdown_table,
    create_networth_table,
    create_portfolio_tree,
    create_summary_table,
    format_money,
)
from tradersim.services.portfolio import ALL_PORTFOLIOS_ID, LedgerService
from tradersim.system.config import SystemConfig


@click.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing account")
@pass_config
def init_command(config: SystemConfig, force: bool):
    """
    Create a new account from the configured seed values.

    Example:
        tradersim init
        tradersim init --force
    """
    account_id = config.persistence.account_id
    sync = build_synchronizer(config)

    if not force and sync.load(account_id) is not None:
        fail(f"Account '{account_id}' already exists. Use --force to overwrite it.")

    ledger = LedgerService.from_account_config(config.account)
    sync.on_state_change(account_id, ledger.state)
    sync.flush()

    console.print(f"[bold green]✓ Account '{account_id}' created[/bold green]")
    console.print(create_portfolio_tree(ledger.state))


@click.command("deposit")
@click.argument("amount", type=DECIMAL)
@pass_config
def deposit_command(config: SystemConfig, amount: Decimal):
    """Add cash to the account."""
    with ledger_session(config) as ledger:
        ledger.deposit(amount)
        console.print(f"[green]Deposited {format_money(amount)}[/green]  cash {format_money(ledger.state.cash)}")


@click.command("withdraw")
@click.argument("amount", type=DECIMAL)
@pass_config
def withdraw_command(config: SystemConfig, amount: Decimal):
    """Take cash out of the account."""
    with ledger_session(config) as ledger:
        ledger.withdraw(amount)
        console.print(f"[green]Withdrew {format_money(amount)}[/green]  cash {format_money(ledger.state.cash)}")


@click.command("tether")
@click.argument("price", type=DECIMAL, required=False)
@pass_config
def tether_command(config: SystemConfig, price: Decimal | None):
    """Show or set the tether rate (base units per tether)."""
    with ledger_session(config) as ledger:
        if price is not None:
            ledger.set_tether_price(price)
        console.print(f"Tether price: [yellow]{format_money(ledger.state.tether_price)}[/yellow]")


@click.command("summary")
@click.option("--portfolio", "-p", "portfolio_id", default=ALL_PORTFOLIOS_ID, help="Portfolio id (default: all)")
@click.option("--breakdown", is_flag=True, help="Also show allocation and P&L per root portfolio")
@pass_config
def summary_command(config: SystemConfig, portfolio_id: str, breakdown: bool):
    """
    Show value, cost and P&L for one portfolio or the whole account.

    Example:
        tradersim summary
        tradersim summary -p p-1
        tradersim summary --breakdown
    """
    with ledger_session(config) as ledger:
        summary = ledger.summary(portfolio_id)
        console.print(create_summary_table(summary, ledger.state.cash, ledger.get_net_worth()))
        if breakdown:
            console.print(create_breakdown_table(ledger.state))


@click.command("networth")
@click.option("--limit", "-n", type=int, default=20, show_default=True, help="Number of most recent points")
@pass_config
def networth_command(config: SystemConfig, limit: int):
    """Show the net-worth history, oldest first."""
    with ledger_session(config) as ledger:
        history = ledger.state.net_worth_history[-limit:] if limit > 0 else []
        if not history:
            console.print("[yellow]No net-worth history[/yellow]")
            return
        console.print(create_networth_table(history))
