"""
DolarApi Connector
Fetches the official BCV rate (bolívares per USD)

Author: TM3
Date: 2026-10-19
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from fastpos.core.exceptions import ExchangeRateError

logger = logging.getLogger(__name__)


def parse_rate(data: Any) -> Decimal:
    """
    Extract the rate from a quote response

    The quote carries the rate under `promedio` (average) or, when that key is absent,
    under `price`. Only finite, strictly positive numbers are accepted.

    Raises:
        ExchangeRateError: missing, unparsable or non-positive value
    """
    if not isinstance(data, dict):
        raise ExchangeRateError(f"Unexpected quote payload: {data!r}")

    # A present `promedio` is authoritative, even when it is invalid
    raw = data['promedio'] if 'promedio' in data else data.get('price')
    if raw is None or isinstance(raw, bool):
        raise ExchangeRateError("Quote has neither 'promedio' nor 'price'")

    try:
        rate = Decimal(str(raw))
    except (InvalidOperation, ValueError) as e:
        raise ExchangeRateError(f"Unparsable rate {raw!r}") from e

    if not rate.is_finite() or rate <= 0:
        raise ExchangeRateError(f"Invalid rate {raw!r}")

    return rate


class DolarApiConnector:
    """
    Connector for the exchange-rate quote source

    No timeout is enforced unless one is configured: a slow quote only
    delays its own refresh.
    """

    def __init__(self, url: str, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            url: Quote endpoint (e.g. https://ve.dolarapi.com/v1/dolares/oficial)
            timeout: Seconds, or None for no timeout
            transport: Custom httpx transport (tests)
        """
        self.url = url
        self.timeout = timeout
        self.transport = transport
        self.headers = {'Accept': 'application/json'}

    async def fetch_rate(self) -> Decimal:
        """
        Query the quote source

        Returns:
            Rate in VES per USD

        Raises:
            ExchangeRateError: network, HTTP, JSON or value error
        """
        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                response = await client.get(self.url, headers=self.headers)
                response.raise_for_status()
                data: Dict = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Error fetching exchange rate from {self.url}: {e}")
                raise ExchangeRateError(f"Could not fetch exchange rate: {e}") from e

        return parse_rate(data)
