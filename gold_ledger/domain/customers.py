"""Customer-level copy-on-write operations"""

from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from gold_ledger.domain.models import Customer, Debt, DebtImage
from gold_ledger.domain.exceptions import DebtNotFoundError, InvalidInputError
from gold_ledger.domain.units import new_id, utcnow


def new_customer(name: str, phone: str, now: Optional[datetime] = None) -> Customer:
    if not name or not name.strip():
        raise InvalidInputError("Customer name is required")
    return Customer(
        id=new_id(),
        name=name.strip(),
        phone=(phone or "").strip(),
        created_at=now or utcnow(),
    )


def find_debt(customer: Customer, debt_id: str) -> Debt:
    for debt in customer.debts:
        if debt.id == debt_id:
            return debt
    raise DebtNotFoundError(f"Debt {debt_id} not found for customer {customer.id}")


def add_debt(customer: Customer, debt: Debt) -> Customer:
    return replace(customer, debts=customer.debts + (debt,))


def update_debt(customer: Customer, debt_id: str, operation: Callable[[Debt], Debt]) -> Customer:
    """Replace one debt with the result of applying `operation` to it"""
    find_debt(customer, debt_id)
    return replace(
        customer,
        debts=tuple(operation(d) if d.id == debt_id else d for d in customer.debts),
    )


def remove_debt(customer: Customer, debt_id: str) -> Customer:
    find_debt(customer, debt_id)
    return replace(customer, debts=tuple(d for d in customer.debts if d.id != debt_id))


def rename_debt(customer: Customer, debt_id: str, label: str) -> Customer:
    # Blank labels keep the current one
    return update_debt(
        customer,
        debt_id,
        lambda d: replace(d, label=label.strip() or d.label),
    )


def attach_image(customer: Customer, debt_id: str, payload_ref: str, now: Optional[datetime] = None) -> Customer:
    if not payload_ref:
        raise InvalidInputError("Image payload reference is required")
    image = DebtImage(id=new_id(), payload_ref=payload_ref, added_at=now or utcnow())
    return update_debt(customer, debt_id, lambda d: replace(d, images=d.images + (image,)))


def toggle_archive(customer: Customer) -> Customer:
    return replace(customer, is_archived=not customer.is_archived)
