from decimal import Decimal, ROUND_HALF_UP, getcontext
from datetime import datetime, timezone

getcontext().prec = 28
CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def qround(d: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    return d.quantize(CENTS, rounding=rounding)


def to_money(value) -> Decimal:
    """Normalise a DB or request value into a 2-decimal Decimal."""
    if value is None:
        return ZERO.quantize(CENTS)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return qround(value)


def money_str(d: Decimal) -> str:
    return f"{to_money(d):.2f}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_naive_utc(dt: datetime | None) -> datetime | None:
    # sqlite hands back naive datetimes, postgres aware ones
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
