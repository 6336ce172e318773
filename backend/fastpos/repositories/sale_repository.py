"""
Sale Repository - Data Access Layer for Sales

Handles the sales table and returns Sale domain models.

Author: TM3
Date: 2026-10-19
"""
from typing import Any, Dict

from fastpos.domain.order import CartItem, Sale
from fastpos.models.order import SaleRecord
from fastpos.repositories.base import BaseRepository


class SaleRepository(BaseRepository):
    """
    Repository for Sale data access

    Sales are ordered by date, newest first. The frozen rate is stored in
    the `exchange_rate` column.
    """

    model = SaleRecord
    order_by = "date"
    descending = True

    def to_row(self, sale: Sale) -> Dict[str, Any]:
        return {
            'id': sale.id,
            'order_number': sale.order_number,
            'date': sale.date.isoformat(),
            'items': [item.to_dict() for item in sale.items],
            'total': float(sale.total),
            'payment_method': sale.payment_method.value,
            'exchange_rate': float(sale.exchange_rate_at_sale),
            'status': sale.status.value,
            'customer_name': sale.customer_name,
        }

    def from_row(self, row: Dict[str, Any]) -> Sale:
        """
        Helper method to map a sales row to the Sale domain model.

        Rows written before daily numbering or the kitchen flow existed
        may lack order_number / status / customer_name.
        """
        return Sale(
            id=str(row['id']),
            order_number=row.get('order_number') or 1,
            date=row['date'],
            items=tuple(CartItem(**item) for item in row.get('items') or []),
            total=row['total'],
            payment_method=row['payment_method'],
            exchange_rate_at_sale=row['exchange_rate'],
            status=row.get('status') or 'completed',
            customer_name=row.get('customer_name') or 'Cliente',
        )
