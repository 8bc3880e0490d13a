"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from gold_ledger.infrastructure.clients.gold_price import GoldPriceClient, GoldPriceService
from gold_ledger.infrastructure.clients.sync import SyncClient
from gold_ledger.infrastructure.database.repositories import GoldPriceRepository
from gold_ledger.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_gold_price_service(db: Session = Depends(get_db)) -> GoldPriceService:
    """Provide the daily gold price service backed by the DB cache"""
    return GoldPriceService(GoldPriceRepository(db), GoldPriceClient())


def get_sync_client() -> SyncClient:
    """Provide change notification client instance"""
    return SyncClient()
