"""
Expense Domain Model

Author: TM3
Date: 2026-10-19
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExpenseCategory(str, Enum):
    """Operating expense or merchandise loss"""
    EXPENSE = "expense"
    LOSS = "loss"


class Expense(BaseModel):
    """
    Expense domain model - money going out of the register

    Fields:
        id: Unique expense ID
        date: When it was recorded
        amount: Amount in USD (positive)
        description: What it was for
        category: expense or loss
    """

    id: str = Field(..., description="Expense ID")
    date: datetime = Field(..., description="Record timestamp")
    amount: Decimal = Field(..., description="Amount (USD)", gt=0)
    description: str = Field(..., description="Description", min_length=1)
    category: ExpenseCategory = Field(ExpenseCategory.EXPENSE, description="expense or loss")

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator('date')
    @classmethod
    def _assume_local_time(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.astimezone()

    @property
    def expense_day(self) -> str:
        """Calendar day as a plain YYYY-MM-DD string"""
        return self.date.isoformat()[:10]

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'amount': float(self.amount),
            'description': self.description,
            'category': self.category.value,
        }
