"""SQLAlchemy ORM models for the customer book"""

from sqlalchemy import Column, String, Boolean, Float, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Timestamps and due dates are stored as ISO-8601 text so they round-trip
# exactly on every backend, offsets included.


class CustomerRow(Base):
    """Customer record"""

    __tablename__ = "customer"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False, default="")
    created_at = Column(Text, nullable=False)
    is_archived = Column(Boolean, nullable=False, default=False)

    debts = relationship(
        "DebtRow",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="DebtRow.position",
    )


class DebtRow(Base):
    """Debt owned by a customer"""

    __tablename__ = "debt"

    id = Column(String(64), primary_key=True)
    customer_id = Column(String(64), ForeignKey("customer.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    label = Column(Text, nullable=False)
    unit = Column(String(8), nullable=False)
    principal_cash = Column(Float, nullable=False)
    gold_price_at_registration = Column(Float, nullable=True)
    gold_grams = Column(Float, nullable=True)
    term_months = Column(Integer, nullable=False)
    start_date = Column(Text, nullable=False)

    customer = relationship("CustomerRow", back_populates="debts")
    installments = relationship(
        "InstallmentRow",
        back_populates="debt",
        cascade="all, delete-orphan",
        order_by="InstallmentRow.position",
    )
    history = relationship(
        "LedgerRecordRow",
        back_populates="debt",
        cascade="all, delete-orphan",
        order_by="LedgerRecordRow.position",
    )
    images = relationship(
        "DebtImageRow",
        back_populates="debt",
        cascade="all, delete-orphan",
        order_by="DebtImageRow.position",
    )


class InstallmentRow(Base):
    """Scheduled installment within a debt"""

    __tablename__ = "installment"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), nullable=False)
    debt_id = Column(String(64), ForeignKey("debt.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    due_date = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    paid_amount = Column(Float, nullable=False, default=0.0)
    paid = Column(Boolean, nullable=False, default=False)
    payment_date = Column(Text, nullable=True)

    debt = relationship("DebtRow", back_populates="installments")


class LedgerRecordRow(Base):
    """Payment or increase history entry"""

    __tablename__ = "ledger_record"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), nullable=False)
    debt_id = Column(String(64), ForeignKey("debt.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    timestamp = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    kind = Column(String(16), nullable=False)
    note = Column(Text, nullable=False, default="")
    related_id = Column(String(64), nullable=True)

    debt = relationship("DebtRow", back_populates="history")


class DebtImageRow(Base):
    """Image attachment reference; payloads are stored elsewhere"""

    __tablename__ = "debt_image"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), nullable=False)
    debt_id = Column(String(64), ForeignKey("debt.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    payload_ref = Column(Text, nullable=False)
    added_at = Column(Text, nullable=False)

    debt = relationship("DebtRow", back_populates="images")


class GoldPriceCacheRow(Base):
    """Last gold quote fetched, one row per cache key"""

    __tablename__ = "gold_price_cache"

    key = Column(String(32), primary_key=True, default="daily")
    price = Column(Float, nullable=False)
    source_url = Column(Text, nullable=True)
    fetched_at = Column(Text, nullable=False)
