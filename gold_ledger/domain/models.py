"""Domain models - immutable dataclasses for customers, debts and their ledgers"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class Unit(str, Enum):
    """Value domain a debt is denominated in"""

    CASH = "CASH"  # Egyptian pounds
    GOLD = "GOLD"  # grams


class RecordKind(str, Enum):
    """Kind of ledger entry"""

    PAYMENT = "PAYMENT"
    INCREASE = "INCREASE"


@dataclass(frozen=True)
class Installment:
    """Single monthly obligation, amounts in the owning debt's unit"""

    id: str
    due_date: date
    amount: float
    paid_amount: float = 0.0
    paid: bool = False
    payment_date: Optional[datetime] = None

    @property
    def outstanding(self) -> float:
        return self.amount - self.paid_amount


@dataclass(frozen=True)
class LedgerRecord:
    """Audit entry for a payment or an increase"""

    id: str
    timestamp: datetime
    amount: float  # native unit of the debt
    kind: RecordKind
    note: str = ""
    related_id: Optional[str] = None


@dataclass(frozen=True)
class DebtImage:
    """Attachment reference; the payload itself lives with the storage layer"""

    id: str
    payload_ref: str
    added_at: datetime


@dataclass(frozen=True)
class Debt:
    """
    One invoice owed by a customer.

    principal_cash is always in cash, even for gold debts. For GOLD debts
    gold_price_at_registration is the cash-per-gram rate fixed at creation
    and every installment amount is in grams.
    """

    id: str
    label: str
    unit: Unit
    principal_cash: float
    term_months: int
    start_date: datetime
    installments: Tuple[Installment, ...] = ()
    history: Tuple[LedgerRecord, ...] = ()
    images: Tuple[DebtImage, ...] = ()
    gold_price_at_registration: Optional[float] = None
    gold_grams: Optional[float] = None

    @property
    def is_gold(self) -> bool:
        return self.unit == Unit.GOLD


@dataclass(frozen=True)
class Customer:
    """Customer and the debts they own, in chronological order"""

    id: str
    name: str
    phone: str
    created_at: datetime
    debts: Tuple[Debt, ...] = field(default_factory=tuple)
    is_archived: bool = False


@dataclass(frozen=True)
class PaymentAllocation:
    """Result of allocating a cash payment across a debt's installments"""

    debt: Debt
    applied: float  # native unit
    unallocated: float  # native unit, dropped


@dataclass(frozen=True)
class GoldQuote:
    """Daily gold rate as served by the price collaborator"""

    price: float
    fetched_at: datetime
    source_url: Optional[str] = None
    is_from_cache: bool = False
