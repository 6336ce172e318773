"""
Reports API Endpoints
Cash cut (cierre de caja)

Author: TM3
Date: 2026-10-19
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fastpos.api.deps import get_pos
from fastpos.services.pos import PointOfSale

router = APIRouter()


@router.get("/cash-cut")
async def get_cash_cut(
    start_date: Optional[str] = Query(None, description="Start date (YYYY-MM-DD), defaults to today"),
    end_date: Optional[str] = Query(None, description="End date (YYYY-MM-DD), defaults to today"),
    pos: PointOfSale = Depends(get_pos)
):
    """
    Revenue, expenses, net profit and collected payments per method

    Bolívar buckets use each sale's own exchange rate.
    """
    today = pos.orders.now().date().isoformat()
    report = pos.cash_cut(start_date or today, end_date or today)

    data = report.to_dict()
    data['formatted'] = {
        'total_revenue': pos.converter.format_usd(report.total_revenue),
        'total_expenses': pos.converter.format_usd(report.total_expenses),
        'net_profit': pos.converter.format_usd(report.net_profit),
        'usd_cash': pos.converter.format_usd(report.per_method.usd_cash),
        'usd_zelle': pos.converter.format_usd(report.per_method.usd_zelle),
        'ves_mobile': pos.converter.format_ves(report.per_method.ves_mobile),
        'ves_card': pos.converter.format_ves(report.per_method.ves_card),
    }
    return {"status": "success", "data": data}
