"""
Domain Layer - Business Entities

Pydantic models for the point-of-sale entities. All of them are frozen, so
snapshots handed out by the ledgers can't be mutated by callers.

Author: TM3
Date: 2026-10-19
"""
from fastpos.domain.product import Product
from fastpos.domain.order import CartItem, OrderStatus, PaymentMethod, Sale
from fastpos.domain.expense import Expense, ExpenseCategory
from fastpos.domain.report import CashCut, ReconciliationReport
from fastpos.domain.cart import Cart

__all__ = [
    'Product', 'CartItem', 'OrderStatus', 'PaymentMethod', 'Sale',
    'Expense', 'ExpenseCategory', 'CashCut', 'ReconciliationReport', 'Cart',
]
