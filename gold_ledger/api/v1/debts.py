"""/v1/customers/{customer_id}/debts - opening debts and recording ledger operations"""

import logging
from typing import Callable
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from gold_ledger.api.v1.schemas import (
    CustomerSchema,
    DebtCreateRequest,
    DebtRenameRequest,
    ImageAttachRequest,
    IncreaseRequest,
    PaymentRequest,
    PaymentResponse,
)
from gold_ledger.api.dependencies import get_gold_price_service, get_request_id, get_sync_client
from gold_ledger.api.errors import to_http_error
from gold_ledger.infrastructure.database.session import get_db
from gold_ledger.infrastructure.database.repositories import CustomerRepository
from gold_ledger.infrastructure.clients.gold_price import GoldPriceService
from gold_ledger.infrastructure.clients.sync import SyncClient, change_event, CUSTOMER_CHANGED
from gold_ledger.infrastructure.observability.logging import log_ledger_operation, log_unallocated_payment
from gold_ledger.infrastructure.observability.metrics import record_ledger_operation, record_unallocated_payment
from gold_ledger.domain.adjustments import apply_increase
from gold_ledger.domain.customers import add_debt, attach_image, find_debt, remove_debt, rename_debt, update_debt
from gold_ledger.domain.exceptions import DomainException
from gold_ledger.domain.installments import open_debt
from gold_ledger.domain.ledger import toggle_installment
from gold_ledger.domain.models import Customer, DebtImage, PaymentAllocation, Unit
from gold_ledger.domain.payments import allocate_payment
from gold_ledger.domain.units import new_id, utcnow

router = APIRouter()


def _commit(
    db: Session,
    request_id: str,
    customer_id: str,
    change: Callable[[Customer], Customer],
) -> Customer:
    """Load, apply one copy-on-write change, persist and commit; one write per request"""
    repo = CustomerRepository(db)
    try:
        updated = change(repo.get(customer_id))
        repo.save(updated)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_error(e, request_id)
    return updated


@router.post("/customers/{customer_id}/debts", response_model=CustomerSchema, status_code=201)
async def create_debt(
    customer_id: str,
    body: DebtCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    price_service: GoldPriceService = Depends(get_gold_price_service),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """
    Open a debt and generate its monthly schedule.

    Flow:
    1. Fix the registration rate (explicit, or today's quote for GOLD)
    2. Build the debt and its installments
    3. Append it to the customer and persist
    4. Publish the change event
    """
    request_id = get_request_id(request)

    rate = body.gold_price_at_registration
    if body.unit == Unit.GOLD and rate is None:
        try:
            rate = (await price_service.current_quote()).price
        except DomainException as e:
            db.rollback()
            raise to_http_error(e, request_id)

    now = utcnow()
    images = [DebtImage(id=new_id(), payload_ref=ref, added_at=now) for ref in body.image_refs]
    opened = {}

    def change(customer: Customer) -> Customer:
        debt = open_debt(
            body.principal_cash,
            body.term_months,
            body.unit,
            gold_price_at_registration=rate,
            label=body.label,
            images=images,
            now=now,
        )
        opened["debt"] = debt
        return add_debt(customer, debt)

    customer = _commit(db, request_id, customer_id, change)
    debt = opened["debt"]

    record_ledger_operation("open", debt.unit.value)
    log_ledger_operation(request_id, customer_id, debt.id, "open", debt.unit.value, debt.gold_grams or debt.principal_cash)
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, debt.id, "open"))
    return CustomerSchema.from_domain(customer)


@router.patch("/customers/{customer_id}/debts/{debt_id}", response_model=CustomerSchema)
def rename(
    customer_id: str,
    debt_id: str,
    body: DebtRenameRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    customer = _commit(db, get_request_id(request), customer_id, lambda c: rename_debt(c, debt_id, body.label))
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, debt_id, "rename"))
    return CustomerSchema.from_domain(customer)


@router.delete("/customers/{customer_id}/debts/{debt_id}", response_model=CustomerSchema)
def delete_debt(
    customer_id: str,
    debt_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """Delete a debt with its installments, history and image references"""
    request_id = get_request_id(request)
    customer = _commit(db, request_id, customer_id, lambda c: remove_debt(c, debt_id))

    logging.info("Debt deleted", extra={"request_id": request_id, "customer_id": customer_id, "debt_id": debt_id})
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, debt_id, "delete"))
    return CustomerSchema.from_domain(customer)


@router.post("/customers/{customer_id}/debts/{debt_id}/payments", response_model=PaymentResponse)
def record_payment(
    customer_id: str,
    debt_id: str,
    body: PaymentRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """
    Allocate a cash payment over the debt's installments.

    Gold debts convert at their registration rate. Any value left after the
    last installment is dropped and reported back as `unallocated`.
    """
    request_id = get_request_id(request)
    allocations = {}

    def change(customer: Customer) -> Customer:
        def pay(debt):
            allocation = allocate_payment(debt, body.cash_amount)
            allocations["result"] = allocation
            return allocation.debt

        return update_debt(customer, debt_id, pay)

    customer = _commit(db, request_id, customer_id, change)
    allocation: PaymentAllocation = allocations["result"]
    unit = allocation.debt.unit.value

    record_ledger_operation("payment", unit)
    log_ledger_operation(request_id, customer_id, debt_id, "payment", unit, allocation.applied + allocation.unallocated)
    if allocation.unallocated > 0:
        record_unallocated_payment(unit)
        log_unallocated_payment(request_id, debt_id, unit, allocation.unallocated)

    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, debt_id, "payment"))
    return PaymentResponse(
        customer=CustomerSchema.from_domain(customer),
        applied=allocation.applied,
        unallocated=allocation.unallocated,
    )


@router.post("/customers/{customer_id}/debts/{debt_id}/increases", response_model=CustomerSchema)
def record_increase(
    customer_id: str,
    debt_id: str,
    body: IncreaseRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """Increase a debt by a cash amount, spread over its unpaid installments"""
    request_id = get_request_id(request)
    customer = _commit(
        db,
        request_id,
        customer_id,
        lambda c: update_debt(c, debt_id, lambda d: apply_increase(d, body.cash_amount, body.reason)),
    )

    debt = find_debt(customer, debt_id)
    record_ledger_operation("increase", debt.unit.value)
    log_ledger_operation(request_id, customer_id, debt_id, "increase", debt.unit.value, debt.history[-1].amount)
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, debt_id, "increase"))
    return CustomerSchema.from_domain(customer)


@router.post(
    "/customers/{customer_id}/debts/{debt_id}/installments/{installment_id}/toggle",
    response_model=CustomerSchema,
)
def toggle(
    customer_id: str,
    debt_id: str,
    installment_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """Manually flip an installment between paid and unpaid"""
    request_id = get_request_id(request)
    customer = _commit(
        db,
        request_id,
        customer_id,
        lambda c: update_debt(c, debt_id, lambda d: toggle_installment(d, installment_id)),
    )

    debt = find_debt(customer, debt_id)
    record_ledger_operation("toggle", debt.unit.value)
    log_ledger_operation(request_id, customer_id, debt_id, "toggle", debt.unit.value)
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, debt_id, "toggle"))
    return CustomerSchema.from_domain(customer)


@router.post("/customers/{customer_id}/debts/{debt_id}/images", response_model=CustomerSchema)
def add_image(
    customer_id: str,
    debt_id: str,
    body: ImageAttachRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    sync_client: SyncClient = Depends(get_sync_client),
):
    """Attach an image reference; the payload itself is stored by the image collaborator"""
    customer = _commit(db, get_request_id(request), customer_id, lambda c: attach_image(c, debt_id, body.payload_ref))
    background_tasks.add_task(sync_client.publish, change_event(CUSTOMER_CHANGED, customer_id, debt_id, "image"))
    return CustomerSchema.from_domain(customer)
