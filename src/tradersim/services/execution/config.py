"""Configuration for trade tickets.

Defines how trading fees are charged.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

FeeType = Literal["percentage", "fixed"]


@dataclass
class FeeConfig:
    """Fee calculation settings.

    Supports two fee models:
    1. Percentage: value percent of the trade total in base currency
    2. Fixed: value in base currency, independent of size

    Attributes:
        fee_type: "percentage" or "fixed"
        value: Percent (e.g. 0.2 = 0.2%) or flat base-currency amount

    Examples:
        Percentage (default 0.2%):
        >>> config = FeeConfig()
        >>> # total 1,000,000: 1,000,000 * 0.2 / 100 = 2,000

        Fixed:
        >>> config = FeeConfig(fee_type="fixed", value=Decimal("5000"))
        >>> # Any size: 5,000
    """

    fee_type: FeeType = "percentage"
    value: Decimal = Decimal("0.2")

    def __post_init__(self) -> None:
        """Validate fee model and value."""
        if self.fee_type not in ("percentage", "fixed"):
            raise ValueError(f"Invalid fee type: {self.fee_type}. Must be 'percentage' or 'fixed'")
        if self.value < 0:
            raise ValueError(f"Fee value cannot be negative, got {self.value}")
