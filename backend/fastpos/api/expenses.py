"""
Expenses API Endpoints

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from fastpos.api.deps import get_pos
from fastpos.core.exceptions import DomainValidationError
from fastpos.domain.expense import ExpenseCategory
from fastpos.services.pos import PointOfSale
from fastpos.services.reconciliation_service import ReconciliationEngine

router = APIRouter()


class ExpenseCreate(BaseModel):
    """Schema for recording an expense"""
    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    category: ExpenseCategory = ExpenseCategory.EXPENSE
    currency: Literal["USD", "VES"] = "USD"


@router.get("/")
async def get_expenses(
    start_date: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    pos: PointOfSale = Depends(get_pos)
):
    expenses = ReconciliationEngine.filter_expenses(pos.expenses.list_expenses(), start_date, end_date)
    return {"status": "success", "count": len(expenses), "data": [expense.to_dict() for expense in expenses]}


@router.post("/", status_code=201)
async def create_expense(body: ExpenseCreate, pos: PointOfSale = Depends(get_pos)):
    """Amounts in VES are converted to USD at the current rate"""
    try:
        if body.currency == "VES":
            expense = pos.expenses.add_in_local_currency(body.amount, body.description, body.category)
        else:
            expense = pos.expenses.add(body.amount, body.description, body.category)
    except DomainValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {"status": "success", "data": expense.to_dict()}


@router.delete("/{expense_id}")
async def delete_expense(expense_id: str, pos: PointOfSale = Depends(get_pos)):
    """Permanent; unknown IDs are a no-op"""
    expense = pos.expenses.delete(expense_id)
    return {"status": "success", "deleted": expense is not None}
