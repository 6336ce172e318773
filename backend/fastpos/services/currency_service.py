"""
Currency Service - USD / bolívar conversion and the current exchange rate

Author: TM3
Date: 2026-10-19
"""
import logging
import threading
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from fastpos.core.exceptions import ExchangeRateError, InvalidExchangeRateError
from fastpos.services import events as ev

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]

CENTS = Decimal('0.01')


def validate_rate(rate: Number) -> Decimal:
    """
    Coerce a rate to Decimal and check it's strictly positive

    Raises:
        InvalidExchangeRateError: zero, negative, infinite or not a number
    """
    try:
        value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    except (InvalidOperation, ValueError) as e:
        raise InvalidExchangeRateError(f"Invalid exchange rate: {rate!r}") from e

    if not value.is_finite() or value <= 0:
        raise InvalidExchangeRateError(f"Exchange rate must be positive, got {rate!r}")

    return value


class CurrencyConverter:
    """
    Stateless USD <-> VES conversion

    Values are never rounded here; rounding to cents happens only in the
    format_* helpers used for display.
    """

    @staticmethod
    def to_local(usd: Decimal, rate: Number) -> Decimal:
        """USD -> VES"""
        return Decimal(usd) * validate_rate(rate)

    @staticmethod
    def to_usd(local: Decimal, rate: Number) -> Decimal:
        """VES -> USD"""
        return Decimal(local) / validate_rate(rate)

    @staticmethod
    def round_cents(amount: Decimal) -> Decimal:
        return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)

    @classmethod
    def format_usd(cls, amount: Decimal) -> str:
        """$1,234.56"""
        value = cls.round_cents(amount)
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.2f}"

    @classmethod
    def format_ves(cls, amount: Decimal) -> str:
        """Bs. 1.234,56 (Venezuelan grouping)"""
        value = cls.round_cents(amount)
        sign = "-" if value < 0 else ""
        text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
        return f"{sign}Bs. {text}"


class ExchangeRateProvider:
    """
    Holds the current rate (VES per USD)

    Starts from the last saved rate, or the configured fallback. A failed
    refresh never touches the rate; every accepted change is saved locally
    and published as `rate_changed`.
    """

    def __init__(self, source, settings_repository, default_rate: Number, event_bus):
        """
        Args:
            source: DolarApiConnector (anything with async fetch_rate())
            settings_repository: SettingsRepository used to persist the rate
            default_rate: Fallback when nothing was saved
            event_bus: EventBus for rate events
        """
        self.source = source
        self.settings_repository = settings_repository
        self.events = event_bus
        self._lock = threading.Lock()
        self.last_origin = "default"

        saved = settings_repository.get_exchange_rate()
        if saved is not None:
            self._rate = saved
            self.last_origin = "saved"
        else:
            self._rate = validate_rate(default_rate)

    @property
    def rate(self) -> Decimal:
        with self._lock:
            return self._rate

    async def refresh(self) -> Decimal:
        """
        Fetch the rate from the quote source

        Returns:
            The new current rate

        Raises:
            ExchangeRateError: the previous rate is kept
        """
        try:
            rate = await self.source.fetch_rate()
            rate = validate_rate(rate)
        except (ExchangeRateError, InvalidExchangeRateError) as e:
            logger.warning(f"Exchange rate refresh failed, keeping {self.rate}: {e}")
            self.events.publish(ev.RATE_REFRESH_FAILED, error=str(e), rate=str(self.rate))
            if isinstance(e, ExchangeRateError):
                raise
            raise ExchangeRateError(str(e)) from e

        return self._apply(rate, origin="refresh")

    def set_manual(self, rate: Number) -> Decimal:
        """
        Override the rate by hand

        Raises:
            InvalidExchangeRateError: rate is not strictly positive
        """
        return self._apply(validate_rate(rate), origin="manual")

    def _apply(self, rate: Decimal, origin: str) -> Decimal:
        with self._lock:
            previous = self._rate
            self._rate = rate
            self.last_origin = origin

        self.settings_repository.set_exchange_rate(rate)
        logger.info(f"Exchange rate set to {rate} ({origin}, was {previous})")
        self.events.publish(ev.RATE_CHANGED, rate=str(rate), previous=str(previous), origin=origin)
        return rate

    def to_local(self, usd: Decimal, rate: Optional[Number] = None) -> Decimal:
        """Convert at the given rate, or at the current one"""
        return CurrencyConverter.to_local(usd, self.rate if rate is None else rate)

    def to_usd(self, local: Decimal, rate: Optional[Number] = None) -> Decimal:
        return CurrencyConverter.to_usd(local, self.rate if rate is None else rate)
