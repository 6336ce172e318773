"""
Backup document (import/export wire format)

Author: TM3
Date: 2026-10-19
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fastpos.domain.expense import Expense
from fastpos.domain.order import Sale
from fastpos.domain.product import Product

BACKUP_VERSION = 1


class BackupDocument(BaseModel):
    """
    Full state snapshot

    `products` and `sales` are required (null is rejected); `expenses`
    defaults to empty and `exchangeRate` is optional.
    """

    version: int = Field(BACKUP_VERSION, description="Format version")
    timestamp: Optional[datetime] = Field(None, description="Export time (ISO-8601)")
    products: List[Product]
    sales: List[Sale]
    expenses: Optional[List[Expense]] = None
    exchange_rate: Optional[Decimal] = Field(None, alias="exchangeRate")

    model_config = ConfigDict(populate_by_name=True)


class BackupSummary(BaseModel):
    """What an import replaced"""

    products: int
    sales: int
    expenses: int
    exchange_rate_applied: bool = False
