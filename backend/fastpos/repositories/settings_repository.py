"""
Settings Repository - local key/value settings

Author: TM3
Date: 2026-10-19
"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from fastpos.models.app_setting import AppSetting

EXCHANGE_RATE_KEY = "exchange_rate"


class SettingsRepository:
    """Small key/value store for values that must survive a restart"""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            record = session.get(AppSetting, key)
            return record.value if record else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            session.merge(AppSetting(key=key, value=value))
            session.commit()

    def get_exchange_rate(self) -> Optional[Decimal]:
        """
        Last saved exchange rate

        Returns:
            The rate, or None if nothing valid was saved
        """
        value = self.get(EXCHANGE_RATE_KEY)
        if value is None:
            return None
        try:
            rate = Decimal(value)
        except InvalidOperation:
            return None
        if not rate.is_finite() or rate <= 0:
            return None
        return rate

    def set_exchange_rate(self, rate: Decimal) -> None:
        self.set(EXCHANGE_RATE_KEY, str(rate))
