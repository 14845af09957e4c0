"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str, decimal_separator: str = ".", grouping_separator: str = ",") -> Decimal:
    """Parse a statement amount into a Decimal with two decimal places.

    Handles various formats:
    - "123.45" / "123,45" (depending on the decimal separator)
    - "1.234,56" / "1,234.56"
    - "R$ -123,45", "$123.45"
    - "(123.45)" (negative in parentheses)
    - "123.45-" (trailing minus)
    - "+123.45"

    Args:
        amount_str: Amount string
        decimal_separator: Character used before the cents
        grouping_separator: Character used between thousands

    Returns:
        Decimal amount, quantized to cents

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Amount value is missing")

    normalized = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if normalized.startswith("(") and normalized.endswith(")"):
        is_negative = True
        normalized = normalized[1:-1]

    # Remove currency symbols and any whitespace, including non-breaking spaces
    normalized = re.sub(r"R\$|[$€£¥]", "", normalized)
    normalized = re.sub(r"\s", "", normalized)

    normalized = normalized.replace(grouping_separator, "")
    normalized = normalized.replace(decimal_separator, ".")
    normalized = normalized.replace(",", ".")
    normalized = normalized.replace("+", "")

    if normalized.endswith("-"):
        normalized = "-" + normalized[:-1]

    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        raise ValueError(f'Unable to parse amount "{amount_str}"')
    if not amount.is_finite():
        raise ValueError(f'Unable to parse amount "{amount_str}"')

    if is_negative:
        amount = -abs(amount)
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f'Amount "{amount_str}" is too large')
