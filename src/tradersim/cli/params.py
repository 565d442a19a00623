"""Click parameter types."""

from decimal import Decimal, InvalidOperation

import click


class DecimalParamType(click.ParamType):
    """Parses command-line numbers as Decimal (commas allowed as separators)."""

    name = "decimal"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value).replace(",", ""))
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid number", param, ctx)


DECIMAL = DecimalParamType()
