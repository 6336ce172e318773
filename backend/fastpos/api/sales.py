"""
Sales API Endpoints
Checkout, order history and the kitchen queue

Author: TM3
Date: 2026-10-19
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from fastpos.api.deps import get_pos
from fastpos.core.exceptions import DomainValidationError
from fastpos.domain.order import OrderStatus, PaymentMethod
from fastpos.services.pos import PointOfSale

router = APIRouter()


class CheckoutLine(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class CheckoutRequest(BaseModel):
    """Schema for a checkout"""
    items: List[CheckoutLine] = Field(..., min_length=1)
    payment_method: PaymentMethod
    customer_name: Optional[str] = None
    route_to_kitchen: bool = True


class StatusUpdate(BaseModel):
    status: OrderStatus


@router.post("/checkout", status_code=201)
async def checkout(body: CheckoutRequest, pos: PointOfSale = Depends(get_pos)):
    """
    Build a cart from catalog products and record the sale

    Prices are copied from the catalog at this moment; the sale freezes the
    current exchange rate.
    """
    cart = pos.new_cart()
    for line in body.items:
        product = pos.catalog.get_product(line.product_id)
        if product is None:
            raise HTTPException(status_code=422, detail=f"Unknown product {line.product_id}")
        cart.add(product, line.quantity)

    if cart.subtotal <= 0:
        raise HTTPException(status_code=422, detail="Sale total must be positive")

    try:
        sale = cart.checkout(
            pos.orders,
            body.payment_method,
            customer_name=body.customer_name,
            route_to_kitchen=body.route_to_kitchen,
        )
    except DomainValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {"status": "success", "data": sale.to_dict()}


@router.get("/")
async def get_sales(
    day: Optional[str] = Query(None, description="Only sales of this day (YYYY-MM-DD)"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    limit: int = Query(200, ge=1, le=10000),
    pos: PointOfSale = Depends(get_pos)
):
    """Sales, newest first"""
    sales = pos.orders.list_sales()
    if day:
        sales = [sale for sale in sales if sale.sale_day == day[:10]]
    if status:
        sales = [sale for sale in sales if sale.status == status]

    total = len(sales)
    data = [sale.to_dict() for sale in sales[:limit]]
    return {"status": "success", "total": total, "count": len(data), "data": data}


@router.get("/active")
async def get_active_orders(pos: PointOfSale = Depends(get_pos)):
    """Kitchen queue: pending and ready orders, oldest first"""
    orders = pos.orders.active_orders()
    return {"status": "success", "count": len(orders), "data": [sale.to_dict() for sale in orders]}


@router.get("/{sale_id}")
async def get_sale(sale_id: str, pos: PointOfSale = Depends(get_pos)):
    sale = pos.orders.get_sale(sale_id)
    if sale is None:
        raise HTTPException(status_code=404, detail=f"Sale {sale_id} not found")
    return {"status": "success", "data": sale.to_dict()}


@router.patch("/{sale_id}/status")
async def update_sale_status(sale_id: str, body: StatusUpdate, pos: PointOfSale = Depends(get_pos)):
    """
    Move an order through pending -> ready -> completed (or cancelled)

    Unknown IDs and disallowed transitions are no-ops: `applied` is false
    and `data` holds the sale as it is (None for unknown IDs).
    """
    sale = pos.orders.update_status(sale_id, body.status)
    applied = sale is not None and sale.status == body.status
    return {
        "status": "success",
        "applied": applied,
        "data": sale.to_dict() if sale else None,
    }
