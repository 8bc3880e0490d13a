"""Integration tests for persistence and serialization round-trips"""

import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from gold_ledger.api.v1.schemas import CustomerSchema
from gold_ledger.domain.adjustments import apply_increase
from gold_ledger.domain.customers import add_debt, attach_image, new_customer, toggle_archive, update_debt
from gold_ledger.domain.exceptions import CustomerNotFoundError
from gold_ledger.domain.installments import open_debt
from gold_ledger.domain.ledger import toggle_installment
from gold_ledger.domain.models import GoldQuote, Unit
from gold_ledger.domain.payments import apply_payment
from gold_ledger.infrastructure.database.repositories import CustomerRepository, GoldPriceRepository


@pytest.fixture
def busy_customer(now):
    """Customer with a cash and a gold debt that have seen every operation"""
    cairo = timezone(timedelta(hours=2))
    customer = new_customer("Samia Fouad", "01098765432", now=now)
    cash = open_debt(1000.0, 3, Unit.CASH, label="Fridge", now=now)
    gold = open_debt(10000.0, 7, Unit.GOLD, gold_price_at_registration=4321.5, label="Necklace", now=now)
    customer = add_debt(add_debt(customer, cash), gold)

    customer = update_debt(customer, cash.id, lambda d: apply_payment(d, 123.45, now=now))
    customer = update_debt(customer, gold.id, lambda d: apply_payment(d, 999.99, now=now.astimezone(cairo)))
    customer = update_debt(customer, gold.id, lambda d: apply_increase(d, 777.0, "Earrings", now=now))
    customer = update_debt(customer, cash.id, lambda d: toggle_installment(d, d.installments[2].id, now=now))
    customer = attach_image(customer, gold.id, "images/necklace.jpg", now=now)
    return customer


def test_customer_round_trips_through_database(db: Session, busy_customer):
    repo = CustomerRepository(db)
    repo.save(busy_customer)
    db.commit()
    db.expunge_all()

    assert repo.get(busy_customer.id) == busy_customer


def test_save_replaces_debt_tree(db: Session, busy_customer):
    repo = CustomerRepository(db)
    repo.save(busy_customer)
    db.commit()

    gold_id = busy_customer.debts[1].id
    changed = toggle_archive(update_debt(busy_customer, gold_id, lambda d: apply_payment(d, 5000.0)))
    repo.save(changed)
    db.commit()
    db.expunge_all()

    loaded = repo.get(busy_customer.id)
    assert loaded == changed
    assert loaded.is_archived


def test_list_and_delete(db: Session, busy_customer, now):
    repo = CustomerRepository(db)
    other = new_customer("Omar", "0111", now=now + timedelta(hours=1))
    repo.save(busy_customer)
    repo.save(other)
    db.commit()

    assert [c.id for c in repo.list_all()] == [busy_customer.id, other.id]

    repo.delete(busy_customer.id)
    db.commit()

    assert [c.id for c in repo.list_all()] == [other.id]
    with pytest.raises(CustomerNotFoundError):
        repo.get(busy_customer.id)
    with pytest.raises(CustomerNotFoundError):
        repo.delete(busy_customer.id)


def test_gold_price_cache_round_trip(db: Session, now):
    repo = GoldPriceRepository(db)
    assert repo.load() is None

    repo.store(GoldQuote(price=5123.75, fetched_at=now, source_url="https://prices.test"))
    repo.store(GoldQuote(price=5200.0, fetched_at=now + timedelta(days=1)))
    db.commit()

    cached = repo.load()
    assert cached.price == 5200.0
    assert cached.fetched_at == now + timedelta(days=1)
    assert cached.is_from_cache


def test_customer_round_trips_through_json(busy_customer):
    payload = CustomerSchema.from_domain(busy_customer).model_dump_json()

    assert CustomerSchema.model_validate_json(payload).to_domain() == busy_customer
