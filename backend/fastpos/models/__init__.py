"""
Modelos SQLAlchemy del almacenamiento local
"""
from fastpos.models.product import ProductRecord
from fastpos.models.order import SaleRecord
from fastpos.models.expense import ExpenseRecord
from fastpos.models.app_setting import AppSetting

__all__ = ['ProductRecord', 'SaleRecord', 'ExpenseRecord', 'AppSetting']
