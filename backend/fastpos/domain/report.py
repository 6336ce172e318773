"""
Reconciliation report models (cash cut)

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CashCut(BaseModel):
    """
    Collected payments grouped by method

    cash and zelle are in USD; mobile and card are in bolívares, each sale
    converted at its own stored rate. `mobile_usd` and `card_usd` keep the
    USD side of the bolívar buckets.
    """

    usd_cash: Decimal = Field(Decimal('0'), description="Cash (USD)")
    usd_zelle: Decimal = Field(Decimal('0'), description="Zelle (USD)")
    ves_mobile: Decimal = Field(Decimal('0'), description="Pago móvil (VES)")
    ves_card: Decimal = Field(Decimal('0'), description="Card (VES)")
    mobile_usd: Decimal = Field(Decimal('0'), description="Pago móvil converted back to USD")
    card_usd: Decimal = Field(Decimal('0'), description="Card converted back to USD")

    model_config = ConfigDict(frozen=True)

    def total_usd_equivalent(self) -> Decimal:
        """All four buckets in USD"""
        return self.usd_cash + self.usd_zelle + self.mobile_usd + self.card_usd

    def to_dict(self) -> dict:
        return {key: float(value) for key, value in self.model_dump().items()}


class ReconciliationReport(BaseModel):
    """Revenue, expenses, profit and cash cut for a day range"""

    start_day: Optional[str] = Field(None, description="First day included (YYYY-MM-DD)")
    end_day: Optional[str] = Field(None, description="Last day included (YYYY-MM-DD)")
    total_revenue: Decimal = Field(..., description="Sum of sale totals (USD)")
    total_expenses: Decimal = Field(..., description="Sum of expense amounts (USD)")
    total_losses: Decimal = Field(Decimal('0'), description="Part of total_expenses categorized as loss")
    net_profit: Decimal = Field(..., description="Revenue minus expenses (USD)")
    sales_count: int = Field(0, description="Sales in range")
    expenses_count: int = Field(0, description="Expenses in range")
    per_method: CashCut = Field(default_factory=CashCut, description="Cash cut")

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict:
        return {
            'start_day': self.start_day,
            'end_day': self.end_day,
            'total_revenue': float(self.total_revenue),
            'total_expenses': float(self.total_expenses),
            'total_losses': float(self.total_losses),
            'net_profit': float(self.net_profit),
            'sales_count': self.sales_count,
            'expenses_count': self.expenses_count,
            'per_method': self.per_method.to_dict(),
        }
