"""Turns one expense amount plus participant shares into per-user splits.

Each split policy is handled by its own pure function; ``calculate_splits``
dispatches on the policy and then checks that the split amounts reconcile
with the expense total.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional, Sequence

from app.core.exceptions import ValidationError
from app.core.utils import CENTS, HUNDRED, ZERO
from app.models.enums import SplitPolicy

DEFAULT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class ShareInput:
    user_id: int
    percentage: Optional[Decimal] = None
    amount: Optional[Decimal] = None


@dataclass(frozen=True)
class SplitShare:
    user_id: int
    percentage: Decimal
    amount: Decimal


def _round(value: Decimal, rounding: str) -> Decimal:
    return value.quantize(CENTS, rounding=rounding)


def _equal_split(total: Decimal, shares: Sequence[ShareInput], rounding: str) -> List[SplitShare]:
    n = len(shares)
    per_person = _round(total / n, rounding)
    pct_per_person = _round(HUNDRED / n, rounding)

    # hand the leftover cents out one at a time, first participants first
    residual = total - per_person * n
    step = CENTS if residual > 0 else -CENTS
    adjust = int(abs(residual) / CENTS)

    result = []
    for i, share in enumerate(shares):
        amount = per_person + step if i < adjust else per_person
        result.append(SplitShare(share.user_id, pct_per_person, amount))
    return result


def _percentage_split(total: Decimal, shares: Sequence[ShareInput], rounding: str) -> List[SplitShare]:
    for share in shares:
        if share.percentage is None:
            raise ValidationError(
                f"Percentage is required for user {share.user_id}", field="splits.percentage"
            )
        if share.percentage < ZERO or share.percentage > HUNDRED:
            raise ValidationError(
                f"Percentage for user {share.user_id} must be between 0 and 100",
                field="splits.percentage",
            )

    total_pct = sum((s.percentage for s in shares), ZERO)
    if total_pct != HUNDRED:
        raise ValidationError(
            f"Total percentage must equal 100, got {total_pct}", field="splits.percentage"
        )

    return [
        SplitShare(s.user_id, s.percentage, _round(total * s.percentage / HUNDRED, rounding))
        for s in shares
    ]


def _amount_split(total: Decimal, shares: Sequence[ShareInput], rounding: str) -> List[SplitShare]:
    for share in shares:
        if share.amount is None:
            raise ValidationError(f"Amount is required for user {share.user_id}", field="splits.amount")
        if share.amount < ZERO:
            raise ValidationError(
                f"Amount for user {share.user_id} cannot be negative", field="splits.amount"
            )

    total_split = sum((s.amount for s in shares), ZERO)
    if total_split != total:
        raise ValidationError(
            f"Total split amount {total_split} must equal expense amount {total}",
            field="splits.amount",
        )

    return [
        SplitShare(s.user_id, _round(s.amount * HUNDRED / total, rounding), s.amount)
        for s in shares
    ]


SPLITTERS: Dict[SplitPolicy, Callable[[Decimal, Sequence[ShareInput], str], List[SplitShare]]] = {
    SplitPolicy.EQUAL: _equal_split,
    SplitPolicy.PERCENTAGE: _percentage_split,
    SplitPolicy.AMOUNT: _amount_split,
}


def calculate_splits(
    total: Decimal,
    policy: SplitPolicy,
    shares: Sequence[ShareInput],
    rounding: str = ROUND_HALF_UP,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> List[SplitShare]:
    """Split ``total`` between ``shares`` according to ``policy``.

    Raises ``ValidationError`` when the input cannot produce splits that sum
    to the total within ``tolerance``.
    """
    if total is None or total <= ZERO:
        raise ValidationError("Expense amount must be greater than zero", field="amount")
    if not shares:
        raise ValidationError("At least one participant is required", field="splits")

    user_ids = [s.user_id for s in shares]
    if len(user_ids) != len(set(user_ids)):
        raise ValidationError("Duplicate users found in splits", field="splits.user_id")

    splits = SPLITTERS[SplitPolicy(policy)](total, shares, rounding)

    split_total = sum((s.amount for s in splits), ZERO)
    if abs(split_total - total) > tolerance:
        raise ValidationError(
            f"Split amounts do not equal expense amount. Total: {split_total}, Expense: {total}",
            field="splits",
        )
    return splits
