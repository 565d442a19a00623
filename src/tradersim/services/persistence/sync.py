"""Debounced persistence of account snapshots.

StateSynchronizer keeps two stores in step with the ledger:
- the local cache is written synchronously on every change
- the remote store is written after a quiet window (DebouncedSaver), so a
  burst of mutations produces a single remote save

Store failures are logged and never reach the ledger.
"""

import threading
from typing import Callable

from tradersim.services.persistence.interface import IStateStore
from tradersim.services.persistence.migration import migrate_snapshot
from tradersim.services.portfolio.models import AppState
from tradersim.system import LoggerFactory

logger = LoggerFactory.get_logger()


class DebouncedSaver:
    """
    Runs the most recently scheduled action once no new action has been
    scheduled for ``delay`` seconds.

    Example:
        >>> saver = DebouncedSaver(2.0)
        >>> saver.schedule(lambda: store.save("default", snapshot_1))
        >>> saver.schedule(lambda: store.save("default", snapshot_2))  # cancels the first
        >>> saver.flush()  # runs the second immediately
    """

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._action: Callable[[], None] | None = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._action is not None

    def schedule(self, action: Callable[[], None]) -> None:
        """Replace any pending action and restart the quiet window."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._action = action
            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _take(self) -> Callable[[], None] | None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            action, self._action, self._timer = self._action, None, None
            return action

    def _fire(self) -> None:
        # held while an action runs; flush() blocks on an in-flight action
        with self._run_lock:
            action = self._take()
            if action is not None:
                action()

    def flush(self) -> None:
        """Run the pending action now (no-op when nothing is pending)."""
        self._fire()

    def close(self) -> None:
        """Drop the pending action without running it."""
        self._take()


class StateSynchronizer:
    """
    Loads and saves account snapshots through a remote store and a local cache.

    Attributes:
        remote: Primary store
        cache: Local fallback store, written on every change
        saver: Debouncer for remote saves

    Example:
        >>> sync = StateSynchronizer(SqliteStateStore("data/tradersim.db"), JsonFileStateStore("data/cache"))
        >>> state = sync.load("default")
        >>> ledger.subscribe(lambda s: sync.on_state_change("default", s))
    """

    def __init__(self, remote: IStateStore, cache: IStateStore, debounce_seconds: float = 2.0) -> None:
        """
        Initialize synchronizer.

        Args:
            remote: Primary store
            cache: Local cache store
            debounce_seconds: Quiet window before a remote save
        """
        self.remote = remote
        self.cache = cache
        self.saver = DebouncedSaver(debounce_seconds)

    def _load_from(self, store: IStateStore, source: str, account_id: str) -> AppState | None:
        try:
            data = store.load(account_id)
            if data is None:
                return None
            return AppState.from_snapshot(migrate_snapshot(data))
        except Exception as e:
            logger.warning("persistence.load_failed", source=source, account_id=account_id, error=str(e))
            return None

    def load(self, account_id: str) -> AppState | None:
        """
        Stored account state.

        Tries the remote store first. When it has nothing (or fails) the
        local cache is adopted and pushed to the remote store right away.

        Returns:
            AppState, or None when neither store holds the account
        """
        state = self._load_from(self.remote, "remote", account_id)
        if state is not None:
            logger.info("persistence.loaded", source="remote", account_id=account_id)
            return state

        state = self._load_from(self.cache, "cache", account_id)
        if state is None:
            logger.info("persistence.empty", account_id=account_id)
            return None

        logger.info("persistence.loaded", source="cache", account_id=account_id)
        self._save_remote(account_id, state)
        return state

    def on_state_change(self, account_id: str, state: AppState) -> None:
        """Write the local cache now and schedule the remote save."""
        snapshot = state.to_snapshot()
        try:
            self.cache.save(account_id, snapshot)
        except Exception as e:
            logger.warning("persistence.save_failed", target="cache", account_id=account_id, error=str(e))
        self.saver.schedule(lambda: self._save_snapshot(account_id, snapshot))

    def _save_remote(self, account_id: str, state: AppState) -> None:
        self._save_snapshot(account_id, state.to_snapshot())

    def _save_snapshot(self, account_id: str, snapshot: dict) -> None:
        try:
            self.remote.save(account_id, snapshot)
        except Exception as e:
            logger.error("persistence.save_failed", target="remote", account_id=account_id, error=str(e))
            return
        logger.debug("persistence.saved", account_id=account_id)

    def flush(self) -> None:
        """Run a pending remote save immediately."""
        self.saver.flush()

    def close(self) -> None:
        """Cancel a pending remote save."""
        self.saver.close()
