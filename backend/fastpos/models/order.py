"""
Modelo de ventas (órdenes)
"""
from sqlalchemy import JSON, Column, Integer, Numeric, String

from fastpos.core.database import Base


class SaleRecord(Base):
    """
    Ventas - entradas del libro, nunca se borran por el usuario

    `date` is kept as the ISO-8601 string (with offset) so the calendar
    day survives storage exactly.
    """
    __tablename__ = "sales"

    id = Column(String(64), primary_key=True)
    order_number = Column(Integer, nullable=False)
    date = Column(String(40), nullable=False, index=True)
    items = Column(JSON, nullable=False)

    # Montos
    total = Column(Numeric(14, 4), nullable=False)
    payment_method = Column(String(20), nullable=False, index=True)
    exchange_rate = Column(Numeric(20, 8), nullable=False)

    # Estado
    status = Column(String(20), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
