"""Trade ticket building.

Turns user-entered tickets (price in base currency or tether, amount or
total, percentage or fixed fee) into TradeIntents for the ledger.
"""

from tradersim.services.execution.config import FeeConfig
from tradersim.services.execution.fees import FeeCalculator
from tradersim.services.execution.ticket import TradeTicket, sell_all

__all__ = [
    "FeeConfig",
    "FeeCalculator",
    "TradeTicket",
    "sell_all",
]
