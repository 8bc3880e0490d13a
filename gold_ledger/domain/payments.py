"""Payment allocation across a debt's installments"""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from gold_ledger.domain.models import Debt, PaymentAllocation, RecordKind, Unit
from gold_ledger.domain.exceptions import NotApplicableError
from gold_ledger.domain.ledger import append_record, make_record
from gold_ledger.domain.units import PAID_EPSILON, is_settled, to_native, utcnow, validate_amount


def payment_note(debt: Debt, cash_amount: float, native_amount: float) -> str:
    note = f"Cash payment of {cash_amount:g} EGP"
    if debt.unit == Unit.GOLD:
        note += f" (equivalent to {native_amount:.2f} g of gold)"
    return note


def allocate_payment(debt: Debt, cash_amount: float, now: Optional[datetime] = None) -> PaymentAllocation:
    """
    Apply a cash payment to installments in schedule order.

    Requirements:
    - Gold debts convert cash to grams at the registration rate
    - Paid installments are skipped; each unpaid one receives
      min(remaining, amount - paid_amount)
    - An installment becomes paid once paid_amount >= amount - epsilon
    - Value left after the last installment is not carried anywhere; it is
      reported as `unallocated` and dropped from the debt
    - Exactly one PAYMENT record with the converted amount is appended

    Raises:
        InvalidAmountError: cash_amount is not a finite positive number
        NotApplicableError: the debt has no installments
    """
    cash_amount = validate_amount(cash_amount, "cash_amount")
    if not debt.installments:
        raise NotApplicableError(f"Debt {debt.id} has no installments to pay")

    now = now or utcnow()
    native_amount = to_native(debt, cash_amount)
    remaining_value = native_amount

    installments = []
    for inst in debt.installments:
        if remaining_value <= 0 or inst.paid:
            installments.append(inst)
            continue

        portion = min(remaining_value, inst.amount - inst.paid_amount)
        new_paid_amount = inst.paid_amount + portion
        remaining_value -= portion

        installments.append(
            replace(
                inst,
                paid_amount=new_paid_amount,
                paid=is_settled(new_paid_amount, inst.amount),
                payment_date=now,
            )
        )

    record = make_record(RecordKind.PAYMENT, native_amount, payment_note(debt, cash_amount, native_amount), now)
    updated = append_record(replace(debt, installments=tuple(installments)), record)

    # Float drift within epsilon of zero is an exact payoff
    unallocated = remaining_value if remaining_value > PAID_EPSILON else 0.0
    return PaymentAllocation(debt=updated, applied=native_amount - unallocated, unallocated=unallocated)


def apply_payment(debt: Debt, cash_amount: float, now: Optional[datetime] = None) -> Debt:
    """Allocate a cash payment and return the updated debt"""
    return allocate_payment(debt, cash_amount, now).debt
