"""Monthly installment schedule generation for new debts"""

from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from gold_ledger.domain.models import Debt, DebtImage, Installment, Unit
from gold_ledger.domain.exceptions import InvalidTermError, MissingGoldRateError
from gold_ledger.domain.units import new_id, utcnow, validate_amount, validate_gold_rate
from gold_ledger.utils.date_utils import add_months


def generate_schedule(
    principal: float,
    term_months: int,
    unit: Unit,
    gold_grams: float | None = None,
    start_date: date | None = None,
) -> List[Installment]:
    """
    Split a debt into equal monthly installments.

    Requirements:
    - Amount per installment = (grams for GOLD, principal for CASH) / term_months
    - No remainder correction; the last installment is not adjusted, so the
      float sum may drift from the total by a few ulps
    - Installment i (1-indexed) is due i calendar months after start_date

    Args:
        principal: Cash principal (used for CASH debts)
        term_months: Number of monthly installments, at least 1
        unit: Unit of the debt
        gold_grams: Principal in grams, required for GOLD debts
        start_date: Creation date (default: today)

    Returns:
        List of unpaid Installment objects in due-date order

    Example:
        300 cash over 3 months from 2026-01-15 →
        [100 due 2026-02-15, 100 due 2026-03-15, 100 due 2026-04-15]
    """
    if isinstance(term_months, bool) or not isinstance(term_months, int) or term_months < 1:
        raise InvalidTermError(f"term_months must be an integer of at least 1, got {term_months!r}")

    if unit == Unit.GOLD:
        if gold_grams is None:
            raise MissingGoldRateError("Gold schedules require the principal in grams")
        total = validate_amount(gold_grams, "gold_grams")
    else:
        total = validate_amount(principal, "principal")

    if start_date is None:
        start_date = date.today()

    monthly_amount = total / term_months

    return [
        Installment(
            id=new_id(),
            due_date=add_months(start_date, i),
            amount=monthly_amount,
        )
        for i in range(1, term_months + 1)
    ]


def open_debt(
    principal_cash: float,
    term_months: int,
    unit: Unit,
    gold_price_at_registration: float | None = None,
    label: str = "",
    images: Iterable[DebtImage] = (),
    now: Optional[datetime] = None,
) -> Debt:
    """
    Register a new debt and its schedule.

    For GOLD debts the registration rate is fixed here and the principal in
    grams is derived from it once: gold_grams = principal_cash / rate.
    """
    principal_cash = validate_amount(principal_cash, "principal_cash")
    now = now or utcnow()

    gold_grams = None
    rate = None
    if unit == Unit.GOLD:
        rate = validate_gold_rate(gold_price_at_registration)
        gold_grams = principal_cash / rate

    installments: Tuple[Installment, ...] = tuple(
        generate_schedule(principal_cash, term_months, unit, gold_grams, start_date=now.date())
    )

    return Debt(
        id=new_id(),
        label=label.strip() or "New invoice",
        unit=unit,
        principal_cash=principal_cash,
        term_months=term_months,
        start_date=now,
        installments=installments,
        history=(),
        images=tuple(images),
        gold_price_at_registration=rate,
        gold_grams=gold_grams,
    )
