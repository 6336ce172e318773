"""
Repository Layer - Local Data Access

Repositories encapsulate all local-store queries and return domain models.

Author: TM3
Date: 2026-10-19
"""
from fastpos.repositories.product_repository import ProductRepository
from fastpos.repositories.sale_repository import SaleRepository
from fastpos.repositories.expense_repository import ExpenseRepository
from fastpos.repositories.settings_repository import SettingsRepository

__all__ = ['ProductRepository', 'SaleRepository', 'ExpenseRepository', 'SettingsRepository']
