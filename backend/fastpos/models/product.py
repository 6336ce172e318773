"""
Modelo de productos del catálogo
"""
from sqlalchemy import Column, Numeric, String

from fastpos.core.database import Base


class ProductRecord(Base):
    """
    Productos del catálogo
    """
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(14, 4), nullable=False)
    category = Column(String(100), nullable=False, default="")
