"""State store interface (Protocol).

A store keeps one JSON-compatible account snapshot per account id.
"""

from typing import Any, Protocol

Snapshot = dict[str, Any]


class IStateStore(Protocol):
    """
    Persistence collaborator for account snapshots.

    Implementations may fail with any exception; StateSynchronizer catches
    and logs those failures.

    Example:
        >>> store: IStateStore = JsonFileStateStore("data/cache")
        >>> store.save("default", ledger.state.to_snapshot())
        >>> snapshot = store.load("default")
    """

    def load(self, account_id: str) -> Snapshot | None:
        """Stored snapshot for account_id, or None when nothing is stored."""
        ...

    def save(self, account_id: str, snapshot: Snapshot) -> None:
        """Insert or replace the snapshot for account_id."""
        ...
