"""Map domain exceptions onto HTTP errors"""

import logging
from fastapi import HTTPException

from gold_ledger.domain.exceptions import (
    DomainException,
    GoldPriceUnavailableError,
    InvalidInputError,
    NotApplicableError,
    NotFoundError,
)


def to_http_error(e: DomainException, request_id: str) -> HTTPException:
    if isinstance(e, NotFoundError):
        logging.info(f"Not found: {e}", extra={"request_id": request_id})
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidInputError):
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, NotApplicableError):
        logging.warning(f"Not applicable: {e}", extra={"request_id": request_id})
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, GoldPriceUnavailableError):
        logging.error(f"Gold price error: {e}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail="Gold price service unavailable")
    logging.error(f"Unexpected domain error: {e}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
