"""
Products API Endpoints
Catalog CRUD

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from fastpos.api.deps import get_pos
from fastpos.core.exceptions import DomainValidationError
from fastpos.services.pos import PointOfSale

router = APIRouter()


class ProductCreate(BaseModel):
    """Schema for creating a product"""
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    category: str = ""


class ProductUpdate(BaseModel):
    """Schema for updating a product"""
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None


@router.get("/")
async def get_products(
    search: Optional[str] = Query(None, description="Search by name or category"),
    pos: PointOfSale = Depends(get_pos)
):
    """Catalog sorted by name, with bolívar prices at the current rate"""
    rate = pos.rates.rate
    products = pos.catalog.list_products()

    if search:
        term = search.lower()
        products = [p for p in products if term in p.name.lower() or term in p.category.lower()]

    data = []
    for product in products:
        item = product.to_dict()
        item['price_local'] = float(pos.converter.to_local(product.price, rate))
        data.append(item)

    return {"status": "success", "count": len(data), "exchange_rate": float(rate), "data": data}


@router.post("/", status_code=201)
async def create_product(body: ProductCreate, pos: PointOfSale = Depends(get_pos)):
    try:
        product = pos.catalog.add(body.name, body.price, body.category)
    except DomainValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"status": "success", "data": product.to_dict()}


@router.put("/{product_id}")
async def update_product(product_id: str, body: ProductUpdate, pos: PointOfSale = Depends(get_pos)):
    try:
        product = pos.catalog.update(product_id, name=body.name, price=body.price, category=body.category)
    except DomainValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return {"status": "success", "data": product.to_dict()}


@router.delete("/{product_id}")
async def delete_product(product_id: str, pos: PointOfSale = Depends(get_pos)):
    """Unknown IDs are a no-op"""
    product = pos.catalog.delete(product_id)
    return {"status": "success", "deleted": product is not None}
