"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

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
from gold_ledger.domain import balances
from gold_ledger.domain.balances import BookSummary, OverdueItem


# Entities. Each schema converts to and from its domain value without loss.


class InstallmentSchema(BaseModel):
    """Single installment in a debt schedule"""

    id: str
    due_date: date
    amount: float
    paid_amount: float = 0.0
    paid: bool = False
    payment_date: Optional[datetime] = None

    @classmethod
    def from_domain(cls, inst: Installment) -> "InstallmentSchema":
        return cls(
            id=inst.id,
            due_date=inst.due_date,
            amount=inst.amount,
            paid_amount=inst.paid_amount,
            paid=inst.paid,
            payment_date=inst.payment_date,
        )

    def to_domain(self) -> Installment:
        return Installment(**self.model_dump())


class LedgerRecordSchema(BaseModel):
    id: str
    timestamp: datetime
    amount: float
    kind: RecordKind
    note: str = ""
    related_id: Optional[str] = None

    @classmethod
    def from_domain(cls, rec: LedgerRecord) -> "LedgerRecordSchema":
        return cls(
            id=rec.id,
            timestamp=rec.timestamp,
            amount=rec.amount,
            kind=rec.kind,
            note=rec.note,
            related_id=rec.related_id,
        )

    def to_domain(self) -> LedgerRecord:
        return LedgerRecord(**self.model_dump())


class DebtImageSchema(BaseModel):
    id: str
    payload_ref: str
    added_at: datetime

    @classmethod
    def from_domain(cls, img: DebtImage) -> "DebtImageSchema":
        return cls(id=img.id, payload_ref=img.payload_ref, added_at=img.added_at)

    def to_domain(self) -> DebtImage:
        return DebtImage(**self.model_dump())


class DebtSchema(BaseModel):
    id: str
    label: str
    unit: Unit
    principal_cash: float
    term_months: int
    start_date: datetime
    gold_price_at_registration: Optional[float] = None
    gold_grams: Optional[float] = None
    installments: List[InstallmentSchema] = []
    history: List[LedgerRecordSchema] = []
    images: List[DebtImageSchema] = []

    @classmethod
    def from_domain(cls, debt: Debt) -> "DebtSchema":
        return cls(
            id=debt.id,
            label=debt.label,
            unit=debt.unit,
            principal_cash=debt.principal_cash,
            term_months=debt.term_months,
            start_date=debt.start_date,
            gold_price_at_registration=debt.gold_price_at_registration,
            gold_grams=debt.gold_grams,
            installments=[InstallmentSchema.from_domain(i) for i in debt.installments],
            history=[LedgerRecordSchema.from_domain(r) for r in debt.history],
            images=[DebtImageSchema.from_domain(img) for img in debt.images],
        )

    def to_domain(self) -> Debt:
        return Debt(
            id=self.id,
            label=self.label,
            unit=self.unit,
            principal_cash=self.principal_cash,
            term_months=self.term_months,
            start_date=self.start_date,
            gold_price_at_registration=self.gold_price_at_registration,
            gold_grams=self.gold_grams,
            installments=tuple(i.to_domain() for i in self.installments),
            history=tuple(r.to_domain() for r in self.history),
            images=tuple(img.to_domain() for img in self.images),
        )


class CustomerSchema(BaseModel):
    id: str
    name: str
    phone: str
    created_at: datetime
    is_archived: bool = False
    debts: List[DebtSchema] = []

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerSchema":
        return cls(
            id=customer.id,
            name=customer.name,
            phone=customer.phone,
            created_at=customer.created_at,
            is_archived=customer.is_archived,
            debts=[DebtSchema.from_domain(d) for d in customer.debts],
        )

    def to_domain(self) -> Customer:
        return Customer(
            id=self.id,
            name=self.name,
            phone=self.phone,
            created_at=self.created_at,
            is_archived=self.is_archived,
            debts=tuple(d.to_domain() for d in self.debts),
        )


# Requests


class DebtCreateRequest(BaseModel):
    """Request body for POST /v1/customers/{id}/debts"""

    principal_cash: float = Field(..., gt=0, description="Amount registered, in EGP")
    unit: Unit = Unit.CASH
    term_months: int = Field(..., ge=1, description="Number of monthly installments")
    label: str = ""
    gold_price_at_registration: Optional[float] = Field(
        None, gt=0, description="EGP per gram; defaults to the current daily quote for GOLD debts"
    )
    image_refs: List[str] = []


class CustomerCreateRequest(BaseModel):
    """Request body for POST /v1/customers"""

    name: str = Field(..., min_length=1)
    phone: str = ""
    initial_debt: Optional[DebtCreateRequest] = None


class DebtRenameRequest(BaseModel):
    label: str


class PaymentRequest(BaseModel):
    cash_amount: float = Field(..., gt=0, description="Cash received, in EGP")


class IncreaseRequest(BaseModel):
    cash_amount: float = Field(..., gt=0, description="Cash added to the debt, in EGP")
    reason: str = Field(..., min_length=1)


class ImageAttachRequest(BaseModel):
    payload_ref: str = Field(..., min_length=1)


# Responses


class PaymentResponse(BaseModel):
    customer: CustomerSchema
    applied: float
    unallocated: float


class DebtStatement(BaseModel):
    """Derived figures for one debt, in its own unit"""

    debt_id: str
    label: str
    unit: Unit
    remaining: float
    paid: float
    percent_complete: int
    overdue_count: int
    installments: List[InstallmentSchema]
    history: List[LedgerRecordSchema]

    @classmethod
    def from_domain(cls, debt: Debt, now: datetime) -> "DebtStatement":
        return cls(
            debt_id=debt.id,
            label=debt.label,
            unit=debt.unit,
            remaining=balances.remaining(debt),
            paid=balances.paid(debt),
            percent_complete=balances.percent_complete(debt),
            overdue_count=len(balances.overdue_installments(debt, now)),
            installments=[InstallmentSchema.from_domain(i) for i in debt.installments],
            history=[LedgerRecordSchema.from_domain(r) for r in debt.history],
        )


class StatementResponse(BaseModel):
    customer_id: str
    name: str
    phone: str
    debts: List[DebtStatement]


class CustomerListItem(BaseModel):
    id: str
    name: str
    phone: str
    created_at: datetime
    is_archived: bool
    cash_remaining: float
    gold_grams_remaining: float
    total_value: float
    has_overdue: bool


class CustomerListResponse(BaseModel):
    daily_gold_price: float
    customers: List[CustomerListItem]


class GoldPriceResponse(BaseModel):
    price: float
    source_url: Optional[str] = None
    fetched_at: datetime
    is_from_cache: bool

    @classmethod
    def from_domain(cls, quote: GoldQuote) -> "GoldPriceResponse":
        return cls(
            price=quote.price,
            source_url=quote.source_url,
            fetched_at=quote.fetched_at,
            is_from_cache=quote.is_from_cache,
        )


class OverdueAlert(BaseModel):
    customer_id: str
    customer_name: str
    debt_id: str
    debt_label: str
    unit: Unit
    installment: InstallmentSchema

    @classmethod
    def from_domain(cls, item: OverdueItem) -> "OverdueAlert":
        return cls(
            customer_id=item.customer_id,
            customer_name=item.customer_name,
            debt_id=item.debt_id,
            debt_label=item.debt_label,
            unit=item.unit,
            installment=InstallmentSchema.from_domain(item.installment),
        )


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    cash_remaining: float
    gold_grams_remaining: float
    daily_gold_price: float
    total_value: float
    active_customers: int
    archived_customers: int
    overdue_count: int
    overdue: List[OverdueAlert]

    @classmethod
    def from_domain(cls, summary: BookSummary, alerts: List[OverdueItem]) -> "DashboardResponse":
        return cls(
            cash_remaining=summary.cash_remaining,
            gold_grams_remaining=summary.gold_grams_remaining,
            daily_gold_price=summary.daily_gold_price,
            total_value=summary.total_value,
            active_customers=summary.active_customers,
            archived_customers=summary.archived_customers,
            overdue_count=summary.overdue_count,
            overdue=[OverdueAlert.from_domain(a) for a in alerts],
        )
