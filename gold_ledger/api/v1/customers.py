"""/v1/customers - customer registration, listing, archival and statements"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from gold_ledger.api.v1.schemas import (
    CustomerCreateRequest,
    CustomerListItem,
    CustomerListResponse,
    CustomerSchema,
    DebtStatement,
    StatementResponse,
)
from gold_ledger.api.dependencies import get_gold_price_service, get_request_id, get_sync_client
from gold_ledger.api.errors import to_http_error
from gold_ledger.infrastructure.database.session import get_db
from gold_ledger.infrastructure.database.repositories import CustomerRepository
from gold_ledger.infrastructure.clients.gold_price import GoldPriceService
from gold_ledger.infrastructure.clients.sync import SyncClient, change_event, CUSTOMER_CHANGED, CUSTOMER_DELETED
from gold_ledger.infrastructure.observability.metrics import record_ledger_operation
from gold_ledger.domain.balances import customer_totals, has_overdue
from gold_ledger.domain.customers import add_debt, new_customer, toggle_archive
from gold_ledger.domain.exceptions import DomainException
from gold_ledger.domain.filters import SortOption, StatusFilter, UnitFilter, filter_customers
from gold_ledger.domain.installments import open_debt
from gold_ledger.domain.models import DebtImage, Unit
from gold_ledger.domain.units import new_id

router = APIRouter()


@router.post("/customers", response_model=CustomerSchema, status_code=201)
async def create_customer(
    body: CustomerCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    price_service: GoldPriceService = Depends(get_gold_price_service),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """
    Register a customer, optionally opening their first debt.

    GOLD debts without an explicit rate are registered at the current
    daily quote.
    """
    request_id = get_request_id(request)
    try:
        now = datetime.now(timezone.utc)
        customer = new_customer(body.name, body.phone, now=now)

        if body.initial_debt is not None:
            opening = body.initial_debt
            rate = opening.gold_price_at_registration
            if opening.unit == Unit.GOLD and rate is None:
                rate = (await price_service.current_quote()).price
            debt = open_debt(
                opening.principal_cash,
                opening.term_months,
                opening.unit,
                gold_price_at_registration=rate,
                label=opening.label,
                images=[DebtImage(id=new_id(), payload_ref=ref, added_at=now) for ref in opening.image_refs],
                now=now,
            )
            customer = add_debt(customer, debt)
            record_ledger_operation("open", debt.unit.value)

        CustomerRepository(db).save(customer)
        db.commit()

    except DomainException as e:
        db.rollback()
        raise to_http_error(e, request_id)

    logging.info("Customer created", extra={"request_id": request_id, "customer_id": customer.id})
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer.id))
    return CustomerSchema.from_domain(customer)


@router.get("/customers", response_model=CustomerListResponse)
async def list_customers(
    q: str = Query("", description="Search by name or phone"),
    archived: bool = Query(False, description="Show the archived tab"),
    status: StatusFilter = Query(StatusFilter.ALL),
    unit: UnitFilter = Query(UnitFilter.ALL),
    sort: SortOption = Query(SortOption.NEWEST),
    db: Session = Depends(get_db),
    price_service: GoldPriceService = Depends(get_gold_price_service),
):
    """List customers with their balances; gold valued at the daily rate"""
    quote = await price_service.current_quote()
    db.commit()  # Persist a refreshed quote

    now = datetime.now(timezone.utc)
    customers = filter_customers(
        CustomerRepository(db).list_all(),
        now=now,
        daily_gold_price=quote.price,
        search=q,
        archived=archived,
        status=status,
        unit=unit,
        sort=sort,
    )

    items = []
    for c in customers:
        totals = customer_totals(c, quote.price)
        items.append(
            CustomerListItem(
                id=c.id,
                name=c.name,
                phone=c.phone,
                created_at=c.created_at,
                is_archived=c.is_archived,
                cash_remaining=totals.cash_remaining,
                gold_grams_remaining=totals.gold_grams_remaining,
                total_value=totals.total_value,
                has_overdue=has_overdue(c, now),
            )
        )

    return CustomerListResponse(daily_gold_price=quote.price, customers=items)


@router.get("/customers/{customer_id}", response_model=CustomerSchema)
def get_customer(customer_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        customer = CustomerRepository(db).get(customer_id)
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))
    return CustomerSchema.from_domain(customer)


@router.delete("/customers/{customer_id}", status_code=204)
def delete_customer(
    customer_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """Delete a customer with all their debts; image payloads are the storage layer's concern"""
    request_id = get_request_id(request)
    try:
        CustomerRepository(db).delete(customer_id)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_error(e, request_id)

    logging.info("Customer deleted", extra={"request_id": request_id, "customer_id": customer_id})
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_DELETED, customer_id))


@router.post("/customers/{customer_id}/archive", response_model=CustomerSchema)
def toggle_customer_archive(
    customer_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """Move a customer between the active and archived tabs"""
    request_id = get_request_id(request)
    repo = CustomerRepository(db)
    try:
        customer = toggle_archive(repo.get(customer_id))
        repo.save(customer)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_error(e, request_id)

    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, operation="archive"))
    return CustomerSchema.from_domain(customer)


@router.get("/customers/{customer_id}/statement", response_model=StatementResponse)
def get_statement(customer_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Per-debt figures for the reporting collaborator.

    Returns:
        Remaining, paid, percent complete, overdue count and full history per debt
    """
    try:
        customer = CustomerRepository(db).get(customer_id)
    except DomainException as e:
        raise to_http_error(e, get_request_id(request))

    now = datetime.now(timezone.utc)
    return StatementResponse(
        customer_id=customer.id,
        name=customer.name,
        phone=customer.phone,
        debts=[DebtStatement.from_domain(d, now) for d in customer.debts],
    )
