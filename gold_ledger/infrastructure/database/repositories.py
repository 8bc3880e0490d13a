"""Data access layer for customers, debts and the gold price cache"""

from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from gold_ledger.infrastructure.database.models import (
    CustomerRow,
    DebtRow,
    InstallmentRow,
    LedgerRecordRow,
    DebtImageRow,
    GoldPriceCacheRow,
)
from gold_ledger.domain.models import (
    Customer,
    Debt,
    DebtImage,
    GoldQuote,
    Installment,
    LedgerRecord,
    RecordKind,
    Unit,
)
from gold_ledger.domain.exceptions import CustomerNotFoundError


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _debt_row(debt: Debt, position: int) -> DebtRow:
    return DebtRow(
        id=debt.id,
        position=position,
        label=debt.label,
        unit=debt.unit.value,
        principal_cash=debt.principal_cash,
        gold_price_at_registration=debt.gold_price_at_registration,
        gold_grams=debt.gold_grams,
        term_months=debt.term_months,
        start_date=_ts(debt.start_date),
        installments=[
            InstallmentRow(
                id=inst.id,
                position=i,
                due_date=inst.due_date.isoformat(),
                amount=inst.amount,
                paid_amount=inst.paid_amount,
                paid=inst.paid,
                payment_date=_ts(inst.payment_date),
            )
            for i, inst in enumerate(debt.installments)
        ],
        history=[
            LedgerRecordRow(
                id=rec.id,
                position=i,
                timestamp=_ts(rec.timestamp),
                amount=rec.amount,
                kind=rec.kind.value,
                note=rec.note,
                related_id=rec.related_id,
            )
            for i, rec in enumerate(debt.history)
        ],
        images=[
            DebtImageRow(
                id=img.id,
                position=i,
                payload_ref=img.payload_ref,
                added_at=_ts(img.added_at),
            )
            for i, img in enumerate(debt.images)
        ],
    )


def _to_debt(row: DebtRow) -> Debt:
    return Debt(
        id=row.id,
        label=row.label,
        unit=Unit(row.unit),
        principal_cash=row.principal_cash,
        term_months=row.term_months,
        start_date=_parse_ts(row.start_date),
        gold_price_at_registration=row.gold_price_at_registration,
        gold_grams=row.gold_grams,
        installments=tuple(
            Installment(
                id=r.id,
                due_date=date.fromisoformat(r.due_date),
                amount=r.amount,
                paid_amount=r.paid_amount,
                paid=r.paid,
                payment_date=_parse_ts(r.payment_date),
            )
            for r in row.installments
        ),
        history=tuple(
            LedgerRecord(
                id=r.id,
                timestamp=_parse_ts(r.timestamp),
                amount=r.amount,
                kind=RecordKind(r.kind),
                note=r.note,
                related_id=r.related_id,
            )
            for r in row.history
        ),
        images=tuple(
            DebtImage(id=r.id, payload_ref=r.payload_ref, added_at=_parse_ts(r.added_at))
            for r in row.images
        ),
    )


def _to_customer(row: CustomerRow) -> Customer:
    return Customer(
        id=row.id,
        name=row.name,
        phone=row.phone,
        created_at=_parse_ts(row.created_at),
        debts=tuple(_to_debt(d) for d in row.debts),
        is_archived=row.is_archived,
    )


class CustomerRepository:
    """Repository for customers and everything they own"""

    def __init__(self, db: Session):
        self.db = db

    def save(self, customer: Customer) -> Customer:
        """Persist a customer, replacing its stored debt tree"""
        row = self.db.get(CustomerRow, customer.id)
        if row is None:
            row = CustomerRow(id=customer.id)
            self.db.add(row)
        else:
            row.debts.clear()
            self.db.flush()  # Drop the old tree before re-inserting ids

        row.name = customer.name
        row.phone = customer.phone
        row.created_at = _ts(customer.created_at)
        row.is_archived = customer.is_archived
        row.debts = [_debt_row(debt, i) for i, debt in enumerate(customer.debts)]

        self.db.flush()
        return customer

    def get(self, customer_id: str) -> Customer:
        """
        Load a customer with debts, installments, history and images.

        Raises:
            CustomerNotFoundError: No customer with that id
        """
        row = self.db.get(CustomerRow, customer_id)
        if row is None:
            raise CustomerNotFoundError(f"Customer {customer_id} not found")
        return _to_customer(row)

    def list_all(self) -> List[Customer]:
        rows = self.db.query(CustomerRow).order_by(CustomerRow.created_at).all()
        return [_to_customer(r) for r in rows]

    def delete(self, customer_id: str) -> Customer:
        row = self.db.get(CustomerRow, customer_id)
        if row is None:
            raise CustomerNotFoundError(f"Customer {customer_id} not found")
        customer = _to_customer(row)
        self.db.delete(row)
        self.db.flush()
        return customer


class GoldPriceRepository:
    """Repository for the cached daily gold quote"""

    KEY = "daily"

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> Optional[GoldQuote]:
        row = self.db.get(GoldPriceCacheRow, self.KEY)
        if row is None:
            return None
        return GoldQuote(
            price=row.price,
            source_url=row.source_url,
            fetched_at=_parse_ts(row.fetched_at),
            is_from_cache=True,
        )

    def store(self, quote: GoldQuote) -> None:
        row = self.db.get(GoldPriceCacheRow, self.KEY)
        if row is None:
            row = GoldPriceCacheRow(key=self.KEY)
            self.db.add(row)
        row.price = quote.price
        row.source_url = quote.source_url
        row.fetched_at = _ts(quote.fetched_at)
        self.db.flush()
