"""
Currency Exchange Utilities.

Premium lessons have a fixed price in the local currency, but payments settle in a foreign
currency. The conversion uses a **fixed, configured exchange rate** (no live rates).

Exchange Rate (defaults):
    1 USD = 120 BDT
    1500 BDT = 12.50 USD = 1250 cents
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Union


class Currency(str, Enum):
    """Currencies the checkout knows the minor-unit exponent of."""

    BDT = "BDT"  # Bangladeshi Taka
    INR = "INR"  # Indian Rupees
    USD = "USD"  # US Dollars
    EUR = "EUR"  # Euros
    JPY = "JPY"  # Japanese Yen


# Number of decimal places in each currency's minor unit
MINOR_UNIT_EXPONENTS: Dict[Currency, int] = {
    Currency.BDT: 2,
    Currency.INR: 2,
    Currency.USD: 2,
    Currency.EUR: 2,
    Currency.JPY: 0,
}


def _currency(value: Union[str, Currency]) -> Currency:
    try:
        return Currency(str(value).upper())
    except ValueError:
        raise ValueError(f"Unsupported currency: {value}")


def convert_local_to_settlement(amount_local: Decimal, local_per_settlement_unit: Decimal) -> Decimal:
    """
    Convert a local-currency amount into the settlement currency.

    Args:
        amount_local: Amount in the local currency (e.g. 1500 BDT)
        local_per_settlement_unit: How many local units buy one settlement unit (e.g. 120)

    Returns:
        Decimal: The settlement amount, not yet rounded

    Raises:
        ValueError: If the rate is not positive or the amount is negative

    Example:
        >>> convert_local_to_settlement(Decimal("1500"), Decimal("120"))
        Decimal('12.5')
    """
    if local_per_settlement_unit <= 0:
        raise ValueError("Exchange rate must be positive")
    if amount_local < 0:
        raise ValueError("Amount must not be negative")
    return amount_local / local_per_settlement_unit


def to_minor_units(amount: Decimal, currency: Union[str, Currency]) -> int:
    """
    Express an amount in the currency's smallest unit, rounding half up.

    Example:
        >>> to_minor_units(Decimal("12.5"), "USD")
        1250
        >>> to_minor_units(Decimal("0.125"), "USD")
        13
    """
    exponent = MINOR_UNIT_EXPONENTS[_currency(currency)]
    scaled = (amount * (Decimal(10) ** exponent)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled)


def local_price_in_settlement_minor_units(
    amount_local: Decimal,
    local_per_settlement_unit: Decimal,
    settlement_currency: Union[str, Currency],
) -> int:
    """Fixed local price → settlement-currency minor units, in one step."""
    settlement_amount = convert_local_to_settlement(amount_local, local_per_settlement_unit)
    return to_minor_units(settlement_amount, settlement_currency)
