from decimal import Decimal

from carbid.constant import MONEY_PLACES, MONEY_DIGITS

_QUANTUM: Decimal = Decimal(1).scaleb(-MONEY_PLACES)


def is_valid_amount(value: object) -> bool:
    """Returns whether the value is a positive, exact monetary amount.

    Floats are refused since they cannot represent amounts exactly.
    Integers are accepted, booleans are not.
    At most MONEY_PLACES fractional digits and MONEY_DIGITS digits in total.

    Args:
        value (object): The value to check.

    Returns:
        bool: Whether the value is a valid amount.
    """
    if isinstance(value, bool) or not isinstance(value, (Decimal, int)):
        return False
    amount = Decimal(value)
    if not amount.is_finite() or amount <= 0:
        return False
    if amount.adjusted() >= MONEY_DIGITS - MONEY_PLACES:
        return False
    return amount.normalize().as_tuple().exponent >= -MONEY_PLACES  # type: ignore[operator]


def to_money(value: Decimal | int) -> Decimal:
    """Returns the amount with the fixed number of fractional digits.

    Args:
        value (Decimal | int): A valid amount (see is_valid_amount).

    Returns:
        Decimal: The quantized amount.

    Raises:
        ValueError: If the value is not a valid amount.
    """
    if not is_valid_amount(value):
        raise ValueError(f"Invalid monetary amount: {value!r}")
    return Decimal(value).quantize(_QUANTUM)
