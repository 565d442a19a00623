"""Ledger sessions for CLI commands.

A session loads the account from the configured stores, wires the ledger to
the synchronizer, and flushes the pending remote save when the command ends.
Ledger and validation errors are printed in red and exit with status 1.
"""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import click
from rich.console import Console
from rich.markup import escape

from tradersim.services.persistence import JsonFileStateStore, StateSynchronizer, build_store
from tradersim.services.portfolio import AppState, LedgerError, LedgerService
from tradersim.system.config import SystemConfig

console = Console()


def build_synchronizer(config: SystemConfig) -> StateSynchronizer:
    """Remote store from config plus the JSON cache directory."""
    persistence = config.persistence
    return StateSynchronizer(
        remote=build_store(persistence),
        cache=JsonFileStateStore(Path(persistence.cache_dir)),
        debounce_seconds=persistence.debounce_seconds,
    )


def attach(ledger: LedgerService, sync: StateSynchronizer, account_id: str) -> None:
    """Forward every installed snapshot to the synchronizer."""

    def _on_change(state: AppState) -> None:
        sync.on_state_change(account_id, state)

    ledger.subscribe(_on_change)


def fail(message: str) -> None:
    console.print(f"[bold red]✗[/bold red] [red]{escape(message)}[/red]")
    sys.exit(1)


@contextmanager
def ledger_session(config: SystemConfig) -> Iterator[LedgerService]:
    """
    Open the configured account for one command.

    Exits with status 1 when the account does not exist or the command
    raises a ledger/validation error.
    """
    account_id = config.persistence.account_id
    sync = build_synchronizer(config)
    state = sync.load(account_id)
    if state is None:
        fail(f"Account '{account_id}' not found. Run 'tradersim init' first.")

    ledger = LedgerService(state)
    attach(ledger, sync, account_id)
    try:
        yield ledger
    except (LedgerError, ValueError) as e:
        fail(str(e))
    finally:
        sync.flush()


pass_config = click.make_pass_decorator(SystemConfig)
