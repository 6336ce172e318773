"""
Key/value settings persisted locally (last exchange rate)
"""
from sqlalchemy import Column, String

from fastpos.core.database import Base


class AppSetting(Base):
    __tablename__ = "app_settings"

    key = Column(String(100), primary_key=True)
    value = Column(String(255), nullable=False)
