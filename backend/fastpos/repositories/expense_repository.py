"""
Expense Repository - Data Access Layer for Expenses

Author: TM3
Date: 2026-10-19
"""
from typing import Any, Dict

from fastpos.domain.expense import Expense
from fastpos.models.expense import ExpenseRecord
from fastpos.repositories.base import BaseRepository


class ExpenseRepository(BaseRepository):
    """Expenses and losses, newest first"""

    model = ExpenseRecord
    order_by = "date"
    descending = True

    def to_row(self, expense: Expense) -> Dict[str, Any]:
        return expense.to_dict()

    def from_row(self, row: Dict[str, Any]) -> Expense:
        return Expense(
            id=str(row['id']),
            date=row['date'],
            amount=row['amount'],
            description=row['description'],
            category=row.get('category') or 'expense',
        )
