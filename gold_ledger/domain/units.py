"""Cash and gold value domains and the conversion between them"""

import math
import uuid
from datetime import datetime, timezone

from gold_ledger.domain.models import Debt, Unit
from gold_ledger.domain.exceptions import InvalidAmountError, MissingGoldRateError

# Tolerance for float noise when deciding whether an installment is settled
PAID_EPSILON = 1e-4


def new_id() -> str:
    """Opaque identifier, unique within its owner"""
    return uuid.uuid4().hex[:12]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_amount(amount: float, what: str = "amount") -> float:
    """Reject NaN, infinities, zero and negatives instead of coercing them"""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidAmountError(f"{what} must be a number, got {amount!r}")
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmountError(f"{what} must be a finite number greater than zero, got {amount!r}")
    return float(amount)


def validate_gold_rate(rate: float | None) -> float:
    if rate is None:
        raise MissingGoldRateError("Gold debts require a registration gold price")
    try:
        return validate_amount(rate, "gold price")
    except InvalidAmountError as e:
        raise MissingGoldRateError(str(e)) from e


def is_settled(paid_amount: float, amount: float) -> bool:
    return paid_amount >= amount - PAID_EPSILON


def to_native(debt: Debt, cash_amount: float) -> float:
    """
    Convert a cash amount into the debt's own unit.

    Gold debts always convert at the rate fixed when the debt was
    registered, never at the current daily rate.
    """
    if debt.unit == Unit.GOLD:
        rate = validate_gold_rate(debt.gold_price_at_registration)
        return cash_amount / rate
    return cash_amount


def grams_to_cash(grams: float, daily_gold_price: float) -> float:
    """Value grams at the supplied daily gold rate"""
    return grams * daily_gold_price
