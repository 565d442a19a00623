"""Portfolio tree commands - add, edit, delete, select and list."""

from decimal import Decimal

import click

from tradersim.cli.params import DECIMAL
from tradersim.cli.session import console, ledger_session, pass_config
from tradersim.cli.ui import create_portfolio_tree
from tradersim.system.config import SystemConfig


@click.group("portfolio")
def portfolio_group():
    """Portfolio tree commands - create, edit, delete and list portfolios"""
    pass


@portfolio_group.command("add")
@click.argument("name")
@click.argument("allocation", type=DECIMAL)
@click.option("--parent", "parent_id", default=None, help="Parent portfolio id (default: new root)")
@pass_config
def add_portfolio(config: SystemConfig, name: str, allocation: Decimal, parent_id: str | None):
    """
    Create a portfolio with a budget.

    Sibling budgets must fit the parent's allocation (or net worth for roots).

    Example:
        tradersim portfolio add Crypto 50000000
        tradersim portfolio add Altcoins 10000000 --parent p-3
    """
    with ledger_session(config) as ledger:
        portfolio = ledger.add_portfolio(name, allocation, parent_id)
        console.print(f"[green]Created portfolio {portfolio.name} ({portfolio.id})[/green]")


@portfolio_group.command("edit")
@click.argument("portfolio_id")
@click.option("--name", default=None, help="New name")
@click.option("--allocation", type=DECIMAL, default=None, help="New allocation")
@pass_config
def edit_portfolio(config: SystemConfig, portfolio_id: str, name: str | None, allocation: Decimal | None):
    """Rename or rebudget a portfolio."""
    with ledger_session(config) as ledger:
        current = ledger.get_portfolio(portfolio_id)
        portfolio = ledger.edit_portfolio(
            portfolio_id,
            name if name is not None else current.name,
            allocation if allocation is not None else current.allocation,
        )
        console.print(f"[green]Updated portfolio {portfolio.name} ({portfolio.id})[/green]")


@portfolio_group.command("delete")
@click.argument("portfolio_id")
@click.confirmation_option(prompt="Delete this portfolio, its sub-portfolios and their holdings?")
@pass_config
def delete_portfolio(config: SystemConfig, portfolio_id: str):
    """Delete a portfolio and its whole subtree."""
    with ledger_session(config) as ledger:
        ledger.delete_portfolio(portfolio_id)
        console.print(f"[green]Deleted portfolio {portfolio_id}[/green]")


@portfolio_group.command("select")
@click.argument("portfolio_id")
@pass_config
def select_portfolio(config: SystemConfig, portfolio_id: str):
    """Select a portfolio (ALL_ROOT for every root)."""
    with ledger_session(config) as ledger:
        ledger.select_portfolio(portfolio_id)
        console.print(f"Selected [cyan]{portfolio_id}[/cyan]")


@portfolio_group.command("list")
@pass_config
def list_portfolios(config: SystemConfig):
    """Show the portfolio tree with holdings."""
    with ledger_session(config) as ledger:
        console.print(create_portfolio_tree(ledger.state))
