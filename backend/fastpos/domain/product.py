"""
Product Domain Model

Represents a catalog product. Carts and sales copy products by value,
so a later catalog edit never changes a recorded sale.

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """
    Product domain model - represents a product in our catalog

    Fields:
        id: Unique, stable product ID
        name: Product name
        price: Unit price in USD
        category: Free-text category label (Combos, Bebidas, ...)
    """

    id: str = Field(..., description="Product ID", min_length=1)
    name: str = Field(..., description="Product name", min_length=1)
    price: Decimal = Field(..., description="Unit price (USD)", ge=0)
    category: str = Field("", description="Product category")

    model_config = ConfigDict(frozen=True, from_attributes=True)

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data['price'] = float(self.price)
        return data


# Catalog used when the store starts empty
DEFAULT_PRODUCTS = (
    {'name': 'Combo de Perros', 'price': Decimal('6.50'), 'category': 'Combos'},
    {'name': 'Wooper', 'price': Decimal('5.00'), 'category': 'Hamburguesas'},
    {'name': 'Refresco 1L', 'price': Decimal('2.50'), 'category': 'Bebidas'},
)
