"""Unit tests for manual installment toggling and its ledger records"""

import pytest
from datetime import datetime, timezone
from gold_ledger.domain.ledger import records_for_installment, toggle_installment
from gold_ledger.domain.payments import apply_payment
from gold_ledger.domain.models import RecordKind
from gold_ledger.domain.exceptions import InstallmentNotFoundError


def test_toggle_to_paid_settles_and_records(cash_debt, now):
    updated = toggle_installment(cash_debt, "i2", now=now)
    inst = updated.installments[1]

    assert inst.paid
    assert inst.paid_amount == inst.amount
    assert inst.payment_date == now

    assert len(updated.history) == 1
    record = updated.history[0]
    assert record.kind == RecordKind.PAYMENT
    assert record.related_id == "i2"
    assert record.amount == 100.0
    assert "#2" in record.note


def test_toggle_back_removes_only_its_record(cash_debt, now):
    debt = apply_payment(cash_debt, 40.0, now=now)
    debt = toggle_installment(debt, "i3", now=now)
    assert len(debt.history) == 2

    reverted = toggle_installment(debt, "i3")
    inst = reverted.installments[2]

    assert not inst.paid
    assert inst.paid_amount == 0.0
    assert inst.payment_date is None
    assert reverted.history == debt.history[:1]
    assert records_for_installment(reverted, "i3") == []


def test_toggle_partially_paid_records_outstanding_part(cash_debt):
    debt = apply_payment(cash_debt, 130.0)
    updated = toggle_installment(debt, "i2")

    assert updated.installments[1].paid_amount == 100.0
    assert updated.history[-1].amount == 70.0


def test_toggle_untouched_installments(cash_debt):
    updated = toggle_installment(cash_debt, "i1")

    assert updated.installments[1:] == cash_debt.installments[1:]


def test_toggle_round_trip_restores_installment(cash_debt):
    stamp = datetime(2026, 2, 1, tzinfo=timezone.utc)
    round_trip = toggle_installment(toggle_installment(cash_debt, "i1", now=stamp), "i1")

    assert round_trip.installments == cash_debt.installments
    assert round_trip.history == ()


def test_toggle_unknown_installment(cash_debt):
    with pytest.raises(InstallmentNotFoundError):
        toggle_installment(cash_debt, "missing")
