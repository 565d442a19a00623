"""Fee calculation utilities.

Calculates trading fees based on configuration.
"""

from decimal import Decimal

from tradersim.services.execution.config import FeeConfig

_HUNDRED = Decimal("100")


class FeeCalculator:
    """Calculates fees for trade tickets.

    Attributes:
        config: Fee configuration
    """

    def __init__(self, config: FeeConfig) -> None:
        """Initialize fee calculator.

        Args:
            config: Fee configuration
        """
        self.config = config

    def calculate(self, total_base: Decimal) -> Decimal:
        """Calculate the fee for a trade.

        Args:
            total_base: Trade total in base currency

        Returns:
            Fee in base currency

        Raises:
            ValueError: If total is negative

        Examples:
            >>> calc = FeeCalculator(FeeConfig(fee_type="percentage", value=Decimal("0.5")))
            >>> calc.calculate(Decimal("200000"))
            Decimal('1000.0')
            >>> FeeCalculator(FeeConfig(fee_type="fixed", value=Decimal("3000"))).calculate(Decimal("1"))
            Decimal('3000')
        """
        if total_base < 0:
            raise ValueError(f"Trade total cannot be negative, got {total_base}")

        if self.config.fee_type == "fixed":
            return self.config.value
        return total_base * self.config.value / _HUNDRED
