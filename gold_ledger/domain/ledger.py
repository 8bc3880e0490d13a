"""Ledger history records and manual installment toggling"""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from gold_ledger.domain.models import Debt, LedgerRecord, RecordKind
from gold_ledger.domain.exceptions import InstallmentNotFoundError
from gold_ledger.domain.units import new_id, utcnow


def make_record(
    kind: RecordKind,
    amount: float,
    note: str,
    timestamp: datetime,
    related_id: Optional[str] = None,
) -> LedgerRecord:
    return LedgerRecord(
        id=new_id(),
        timestamp=timestamp,
        amount=amount,
        kind=kind,
        note=note,
        related_id=related_id,
    )


def append_record(debt: Debt, record: LedgerRecord) -> Debt:
    return replace(debt, history=debt.history + (record,))


def records_for_installment(debt: Debt, installment_id: str) -> list[LedgerRecord]:
    return [r for r in debt.history if r.related_id == installment_id]


def toggle_installment(debt: Debt, installment_id: str, now: Optional[datetime] = None) -> Debt:
    """
    Manually mark an installment paid or unpaid.

    Marking paid settles it in full and appends a PAYMENT record tagged with
    the installment id. Marking unpaid resets paid_amount to 0 and removes the
    records tagged with that id. That removal is the only way a ledger record
    ever leaves the history.

    Raises:
        InstallmentNotFoundError: installment_id is not part of the debt
    """
    position = next(
        (i for i, inst in enumerate(debt.installments) if inst.id == installment_id),
        None,
    )
    if position is None:
        raise InstallmentNotFoundError(f"Installment {installment_id} not found in debt {debt.id}")

    now = now or utcnow()
    target = debt.installments[position]
    installments = list(debt.installments)

    if not target.paid:
        settled_amount = target.amount - target.paid_amount
        installments[position] = replace(target, paid=True, paid_amount=target.amount, payment_date=now)
        record = make_record(
            RecordKind.PAYMENT,
            settled_amount,
            f"Installment #{position + 1} marked as paid",
            now,
            related_id=installment_id,
        )
        return append_record(replace(debt, installments=tuple(installments)), record)

    installments[position] = replace(target, paid=False, paid_amount=0.0, payment_date=None)
    history = tuple(r for r in debt.history if r.related_id != installment_id)
    return replace(debt, installments=tuple(installments), history=history)
