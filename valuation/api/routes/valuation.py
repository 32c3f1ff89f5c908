from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from valuation.api.deps import get_default_currency
from valuation.api.mappers.valuation_mapper import account_to_response, entry_value_to_kwargs
from valuation.api.schemas.valuation import ErrorResponse, ValuationRequest, ValuationResponse
from valuation.domain.errors import ClientError
from valuation.engine.valuation import compute_valuation

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/valuation", tags=["valuation"])


@router.post(
    "",
    response_model=ValuationResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_valuation(payload: ValuationRequest) -> ValuationResponse:
    # A fresh account per request, never shared
    entries = [entry_value_to_kwargs(e) for e in payload.entries]

    try:
        account = compute_valuation(entries, default_currency=get_default_currency())
        return account_to_response(account)
    except ClientError as e:
        raise HTTPException(status_code=400, detail=f"{type(e).__name__}: {e}")
    except Exception as e:
        logger.exception("Failed to compute valuation: %s", e)
        raise HTTPException(status_code=500, detail=f"{type(e).__name__}: {e}")
