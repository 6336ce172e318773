"""
Exchange Rate API Endpoints

Author: TM3
Date: 2026-10-19
"""
import logging
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from fastpos.api.deps import get_pos
from fastpos.core.exceptions import ExchangeRateError, InvalidExchangeRateError
from fastpos.services.pos import PointOfSale

logger = logging.getLogger(__name__)
router = APIRouter()


class ManualRate(BaseModel):
    rate: Decimal


def _rate_payload(pos: PointOfSale) -> dict:
    rate = pos.rates.rate
    return {
        "rate": float(rate),
        "origin": pos.rates.last_origin,
        "formatted": pos.converter.format_ves(rate),
    }


@router.get("/")
async def get_exchange_rate(pos: PointOfSale = Depends(get_pos)):
    return {"status": "success", "data": _rate_payload(pos)}


@router.post("/refresh")
async def refresh_exchange_rate(pos: PointOfSale = Depends(get_pos)):
    """
    Fetch the official rate

    On failure the previous rate stays in effect and a 502 is returned
    with it.
    """
    try:
        await pos.rates.refresh()
    except ExchangeRateError as e:
        raise HTTPException(
            status_code=502,
            detail={"message": f"Could not refresh exchange rate: {e}", **_rate_payload(pos)},
        )
    return {"status": "success", "data": _rate_payload(pos)}


@router.put("/manual")
async def set_manual_exchange_rate(body: ManualRate, pos: PointOfSale = Depends(get_pos)):
    try:
        pos.rates.set_manual(body.rate)
    except InvalidExchangeRateError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"status": "success", "data": _rate_payload(pos)}


@router.get("/convert")
async def convert(
    amount: Decimal = Query(..., description="Amount to convert"),
    to: Literal["VES", "USD"] = Query("VES", description="Target currency"),
    pos: PointOfSale = Depends(get_pos)
):
    """Convert at the current rate (for display)"""
    rate = pos.rates.rate
    if to == "VES":
        value = pos.converter.to_local(amount, rate)
        formatted = pos.converter.format_ves(value)
    else:
        value = pos.converter.to_usd(amount, rate)
        formatted = pos.converter.format_usd(value)

    return {
        "status": "success",
        "data": {"amount": float(amount), "to": to, "rate": float(rate), "value": float(value), "formatted": formatted},
    }
