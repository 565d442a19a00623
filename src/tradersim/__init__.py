"""
tradersim - Multi-Portfolio Trading Account Simulator

Portfolio ledger and accounting engine: budgeted portfolio hierarchy,
trade ledger, cost basis, realized/unrealized P&L and net-worth history.
"""

from importlib.metadata import version

try:
    __version__ = version("tradersim")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
