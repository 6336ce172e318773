"""
Product Repository - Data Access Layer for Products

Author: TM3
Date: 2026-10-19
"""
from typing import Any, Dict

from fastpos.domain.product import Product
from fastpos.models.product import ProductRecord
from fastpos.repositories.base import BaseRepository


class ProductRepository(BaseRepository):
    """Catalog products, ordered by name"""

    model = ProductRecord
    order_by = "name"

    def to_row(self, product: Product) -> Dict[str, Any]:
        return product.to_dict()

    def from_row(self, row: Dict[str, Any]) -> Product:
        return Product(
            id=str(row['id']),
            name=row['name'],
            price=row['price'],
            category=row.get('category') or '',
        )
