"""
Modelo de gastos y pérdidas
"""
from sqlalchemy import Column, Numeric, String, Text

from fastpos.core.database import Base


class ExpenseRecord(Base):
    """
    Gastos (expense) y pérdidas (loss)
    """
    __tablename__ = "expenses"

    id = Column(String(64), primary_key=True)
    date = Column(String(40), nullable=False, index=True)
    amount = Column(Numeric(14, 4), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False)
