"""Trade tickets.

A ticket is what a user fills in before trading: a price quoted in either
the base currency (toman) or tether, and either an amount or a total. The
ticket converts everything into base currency with the account's tether
rate, computes the fee and produces a TradeIntent for the ledger.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from tradersim.services.execution.config import FeeConfig
from tradersim.services.execution.fees import FeeCalculator
from tradersim.services.portfolio.models import Asset, TradeIntent, TradeType

Currency = Literal["toman", "tether"]

# Amount derived from a total keeps six decimal places
AMOUNT_QUANTUM = Decimal("0.000001")


@dataclass
class TradeTicket:
    """Trade request as entered by a user.

    Exactly one of amount and total is required; the other is derived.

    Attributes:
        trade_type: buy or sell
        asset_name: Instrument name
        price: Price per unit in ``currency``
        amount: Units (optional if total given)
        total: Trade total in ``currency`` (optional if amount given)
        currency: "toman" (base) or "tether"
        fee: Fee model

    Example:
        >>> ticket = TradeTicket(
        ...     trade_type=TradeType.BUY,
        ...     asset_name="Bitcoin",
        ...     price=Decimal("65000"),
        ...     total=Decimal("1000"),
        ...     currency="tether",
        ... )
        >>> intent = ticket.to_intent(tether_price=Decimal("60000"))
        >>> intent.amount
        Decimal('0.015385')
    """

    trade_type: TradeType
    asset_name: str
    price: Decimal
    amount: Decimal | None = None
    total: Decimal | None = None
    currency: Currency = "toman"
    fee: FeeConfig = field(default_factory=FeeConfig)

    def __post_init__(self) -> None:
        """Validate ticket fields."""
        if self.price <= 0:
            raise ValueError(f"Price must be positive, got {self.price}")
        if self.amount is None and self.total is None:
            raise ValueError("Ticket needs an amount or a total")
        if self.amount is not None and self.amount <= 0:
            raise ValueError(f"Amount must be positive, got {self.amount}")
        if self.total is not None and self.total <= 0:
            raise ValueError(f"Total must be positive, got {self.total}")
        if self.currency not in ("toman", "tether"):
            raise ValueError(f"Invalid currency: {self.currency}. Must be 'toman' or 'tether'")

    def resolved_amount(self) -> Decimal:
        """Units traded; derived from total / price when no amount was given."""
        if self.amount is not None:
            return self.amount
        assert self.total is not None
        return (self.total / self.price).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)

    def resolved_total(self) -> Decimal:
        """Trade total in the ticket's currency."""
        if self.total is not None:
            return self.total
        return self.resolved_amount() * self.price

    def _rate(self, tether_price: Decimal) -> Decimal:
        return tether_price if self.currency == "tether" else Decimal("1")

    def to_intent(self, tether_price: Decimal) -> TradeIntent:
        """Convert into a base-currency TradeIntent.

        Args:
            tether_price: Base units per tether

        Returns:
            TradeIntent with price, total and fee in base currency
        """
        rate = self._rate(tether_price)
        total_base = self.resolved_total() * rate
        return TradeIntent(
            trade_type=self.trade_type,
            asset_name=self.asset_name,
            amount=self.resolved_amount(),
            price=self.price * rate,
            total_value=total_base,
            fee=FeeCalculator(self.fee).calculate(total_base),
        )

    def net_amount(self, tether_price: Decimal) -> Decimal:
        """Cash moved by the trade: total plus fee for buys, minus fee for sells."""
        intent = self.to_intent(tether_price)
        if self.trade_type == TradeType.BUY:
            return intent.total_value + intent.fee
        return intent.total_value - intent.fee


def sell_all(
    asset: Asset,
    price: Decimal | None = None,
    currency: Currency = "toman",
    fee: FeeConfig | None = None,
) -> TradeTicket:
    """Ticket that sells the whole holding of an asset.

    Args:
        asset: Holding to liquidate
        price: Sale price in ``currency`` (defaults to the asset's current price)
        currency: Currency of price
        fee: Fee model (defaults to FeeConfig())
    """
    return TradeTicket(
        trade_type=TradeType.SELL,
        asset_name=asset.name,
        price=price if price is not None else asset.current_price,
        amount=asset.amount,
        currency=currency,
        fee=fee or FeeConfig(),
    )
