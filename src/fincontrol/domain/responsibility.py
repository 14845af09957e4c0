"""Responsibility allocation: splitting a transaction amount between parties.

Each party's share is rounded on its own (ROUND_HALF_UP, two decimals). The
100% invariant is enforced on the percentages; the rounded shares are not
forced to add back up to the transaction amount.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from fincontrol.domain.entities import TransactionResponsibility
from fincontrol.domain.errors import ValidationError, percentages_must_total_100

CENT = Decimal("0.01")
ONE_HUNDRED = Decimal("100")
MIN_PERCENTAGE = Decimal("0.01")


def normalize_percentage(percentage: Decimal) -> Decimal:
    """Bring a percentage to the two-decimal scale used for validation."""
    return Decimal(percentage).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_amount(amount: Decimal, percentage: Decimal) -> Decimal:
    """Return ``round_half_up(amount * percentage / 100, 2)``."""
    return (Decimal(amount) * Decimal(percentage) / ONE_HUNDRED).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


def total_percentage(percentages: Iterable[Decimal]) -> Decimal:
    """Sum percentages after normalizing each one to two decimals."""
    return sum((normalize_percentage(p) for p in percentages), Decimal("0.00"))


def is_percentage_valid(percentages: Iterable[Decimal]) -> bool:
    """True when the normalized percentages add up to exactly 100.00."""
    return total_percentage(percentages) == ONE_HUNDRED


def validate_percentage(percentage: Decimal) -> None:
    """Validate a single share.

    Raises:
        ValidationError: If the percentage is outside 0.01-100 or has more
            than two decimal places
    """
    value = Decimal(percentage)
    if not value.is_finite():
        raise ValidationError(f"Percentage {value} is not a number")
    if value < MIN_PERCENTAGE or value > ONE_HUNDRED:
        raise ValidationError(f"Percentage {value} must be between 0.01 and 100")
    if value != value.quantize(CENT):
        raise ValidationError(f"Percentage {value} must have at most two decimal places")


def validate_split(
    shares: Sequence[tuple[int, Decimal]],
) -> None:
    """Validate a full split of ``(responsible_id, percentage)`` pairs.

    Raises:
        ValidationError: If the split is empty, repeats a responsible, has an
            invalid share, or does not total 100%
    """
    if not shares:
        raise ValidationError("At least one responsibility assignment is required")

    seen: set[int] = set()
    for responsible_id, percentage in shares:
        if responsible_id in seen:
            raise ValidationError(f"Responsible {responsible_id} is assigned more than once")
        seen.add(responsible_id)
        validate_percentage(percentage)

    total = total_percentage(p for _, p in shares)
    if total != ONE_HUNDRED:
        raise ValidationError(percentages_must_total_100(total))


def allocate(
    amount: Decimal,
    shares: Sequence[tuple[int, Decimal, Optional[str]]],
) -> tuple[TransactionResponsibility, ...]:
    """Compute every party's share of ``amount``.

    Args:
        amount: Transaction amount
        shares: ``(responsible_id, percentage, notes)`` triples

    Returns:
        One TransactionResponsibility per share, in input order
    """
    return tuple(
        TransactionResponsibility(
            responsible_id=responsible_id,
            percentage=normalize_percentage(percentage),
            calculated_amount=calculate_amount(amount, percentage),
            notes=notes,
        )
        for responsible_id, percentage, notes in shares
    )


def recalculate(
    amount: Decimal, responsibilities: Iterable[TransactionResponsibility]
) -> tuple[TransactionResponsibility, ...]:
    """Recompute calculated amounts for an existing split after an amount change."""
    return allocate(amount, [(r.responsible_id, r.percentage, r.notes) for r in responsibilities])
