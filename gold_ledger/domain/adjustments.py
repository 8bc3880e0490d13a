"""Debt increases distributed over unpaid installments"""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from gold_ledger.domain.models import Debt, Installment, RecordKind, Unit
from gold_ledger.domain.exceptions import EmptyReasonError, NotApplicableError
from gold_ledger.domain.ledger import append_record, make_record
from gold_ledger.domain.units import new_id, to_native, utcnow, validate_amount
from gold_ledger.utils.date_utils import add_months


def apply_increase(debt: Debt, cash_amount: float, reason: str, now: Optional[datetime] = None) -> Debt:
    """
    Raise a debt's obligation by a cash amount.

    Distribution:
    - Unpaid installments exist: each gets increase / count added to its
      amount; paid_amount is untouched
    - Everything is paid: one new installment for the whole increase, due
      one month after the current last due date

    principal_cash grows by the cash amount; gold_grams grows by the
    converted amount on GOLD debts.

    Raises:
        InvalidAmountError: cash_amount is not a finite positive number
        EmptyReasonError: reason is blank
        NotApplicableError: the debt has no installments
    """
    cash_amount = validate_amount(cash_amount, "cash_amount")
    if not reason or not reason.strip():
        raise EmptyReasonError("A reason is required to increase a debt")
    if not debt.installments:
        raise NotApplicableError(f"Debt {debt.id} has no installments to adjust")

    now = now or utcnow()
    increase = to_native(debt, cash_amount)

    unpaid_count = sum(1 for inst in debt.installments if not inst.paid)
    if unpaid_count:
        per_installment = increase / unpaid_count
        installments = tuple(
            inst if inst.paid else replace(inst, amount=inst.amount + per_installment)
            for inst in debt.installments
        )
    else:
        last_due = debt.installments[-1].due_date
        installments = debt.installments + (
            Installment(id=new_id(), due_date=add_months(last_due, 1), amount=increase),
        )

    gold_grams = debt.gold_grams
    if debt.unit == Unit.GOLD:
        gold_grams = (gold_grams or 0.0) + increase

    record = make_record(RecordKind.INCREASE, increase, reason.strip(), now)

    updated = replace(
        debt,
        principal_cash=debt.principal_cash + cash_amount,
        gold_grams=gold_grams,
        installments=installments,
    )
    return append_record(updated, record)
