"""Display helpers for money amounts"""

from decimal import Decimal, ROUND_HALF_UP


def format_currency(amount: Decimal | int | float) -> str:
    """
    Format an amount as Mexican pesos, es-MX style.

    4400 -> "$4,400.00", -100.5 -> "-$100.50"
    """
    value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    if not value.is_finite():
        return str(value)

    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
