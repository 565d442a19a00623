"""tradersim CLI main entry point."""

from pathlib import Path

import click

from tradersim import __version__
from tradersim.cli.commands import (
    delete_trade_command,
    deposit_command,
    history_command,
    init_command,
    networth_command,
    portfolio_group,
    positions_command,
    price_command,
    summary_command,
    tether_command,
    trade_command,
    withdraw_command,
)
from tradersim.system import LoggerFactory, reload_system_config


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="System configuration file (YAML). Defaults to $TRADERSIM_CONFIG or ./tradersim.yaml",
)
@click.pass_context
def main(ctx: click.Context, config_file: Path | None):
    """tradersim - Multi-portfolio trading account simulator"""
    config = reload_system_config(config_file)
    LoggerFactory.configure(config.logging.to_logger_config())
    ctx.obj = config


# Register commands
main.add_command(init_command)
main.add_command(deposit_command)
main.add_command(withdraw_command)
main.add_command(tether_command)
main.add_command(portfolio_group)
main.add_command(trade_command)
main.add_command(history_command)
main.add_command(delete_trade_command)
main.add_command(price_command)
main.add_command(positions_command)
main.add_command(summary_command)
main.add_command(networth_command)


if __name__ == "__main__":
    main()
