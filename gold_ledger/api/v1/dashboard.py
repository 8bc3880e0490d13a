"""GET /v1/dashboard and /v1/gold-price - shop-wide figures"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from gold_ledger.api.v1.schemas import DashboardResponse, GoldPriceResponse
from gold_ledger.api.dependencies import get_gold_price_service, get_request_id
from gold_ledger.api.errors import to_http_error
from gold_ledger.infrastructure.database.session import get_db
from gold_ledger.infrastructure.database.repositories import CustomerRepository
from gold_ledger.infrastructure.clients.gold_price import GoldPriceService
from gold_ledger.domain.balances import book_summary
from gold_ledger.domain.exceptions import DomainException

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    db: Session = Depends(get_db),
    price_service: GoldPriceService = Depends(get_gold_price_service),
):
    """
    Remaining balances of active customers and overdue alerts.

    Gold is valued at the current daily quote, never at the rates the
    debts were registered with.
    """
    quote = await price_service.current_quote()
    db.commit()  # Persist a refreshed quote

    summary, alerts = book_summary(
        CustomerRepository(db).list_all(),
        daily_gold_price=quote.price,
        now=datetime.now(timezone.utc),
    )
    return DashboardResponse.from_domain(summary, alerts)


@router.get("/gold-price", response_model=GoldPriceResponse)
async def get_gold_price(
    request: Request,
    refresh: bool = Query(False, description="Bypass the daily cache"),
    db: Session = Depends(get_db),
    price_service: GoldPriceService = Depends(get_gold_price_service),
):
    try:
        quote = await price_service.current_quote(force_refresh=refresh)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_error(e, get_request_id(request))
    return GoldPriceResponse.from_domain(quote)
