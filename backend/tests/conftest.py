"""
Pytest fixtures and configuration for FastPOS backend tests

This file provides shared fixtures that can be used across all test modules.
Everything runs against an in-memory SQLite store; the remote store and
the exchange-rate source are mocks.

Author: TM3
Date: 2026-10-19
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from fastpos.connectors.supabase_connector import SupabaseConnector
from fastpos.core.config import Settings
from fastpos.core.database import create_local_engine, create_session_factory
from fastpos.services.pos import PointOfSale

# Caracas, UTC-4
LOCAL_TZ = timezone(timedelta(hours=-4))


class FakeClock:
    """Callable clock the tests can move by hand"""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    """
    Provides a clock fixed at 2026-10-19 09:00 local time

    Scope: function (each test moves its own clock)
    """
    return FakeClock(datetime(2026, 10, 19, 9, 0, tzinfo=LOCAL_TZ))


@pytest.fixture
def test_settings():
    """Settings isolated from the environment: offline, rate 45.00"""
    return Settings(
        LOCAL_DATABASE_URL="sqlite://",
        SUPABASE_URL="",
        SUPABASE_ANON_KEY="",
        DEFAULT_EXCHANGE_RATE=Decimal("45.00"),
        SYNC_INSERT_FAILURE_POLICY="rollback",
        DEFAULT_CUSTOMER_NAME="Cliente",
    )


@pytest.fixture
def session_factory():
    """
    Provides a session factory over a fresh in-memory SQLite database

    Scope: function (new empty database per test)
    """
    return create_session_factory(create_local_engine("sqlite://"))


@pytest.fixture
def rate_source():
    """Quote source whose fetch_rate() returns 36.50"""
    source = MagicMock()
    source.fetch_rate = AsyncMock(return_value=Decimal("36.50"))
    return source


@pytest.fixture
def mock_remote():
    """
    Provides a mocked SupabaseConnector

    Every call succeeds and select_all returns no rows unless a test
    configures it otherwise.
    """
    remote = MagicMock(spec=SupabaseConnector)
    remote.select_all.return_value = []
    remote.select_by_id.return_value = None
    return remote


@pytest.fixture
def pos(session_factory, test_settings, rate_source, clock):
    """
    Provides an offline PointOfSale with an empty catalog

    Automatically shut down after the test
    """
    point_of_sale = PointOfSale(
        session_factory,
        settings=test_settings,
        remote=None,
        rate_source=rate_source,
        clock=clock,
    )
    point_of_sale.sync.load_initial_state()
    yield point_of_sale
    point_of_sale.shutdown()


@pytest.fixture
def online_pos(session_factory, test_settings, rate_source, clock, mock_remote):
    """Provides a PointOfSale mirrored to the mocked remote store"""
    point_of_sale = PointOfSale(
        session_factory,
        settings=test_settings,
        remote=mock_remote,
        rate_source=rate_source,
        clock=clock,
    )
    point_of_sale.sync.load_initial_state()
    yield point_of_sale
    point_of_sale.shutdown()


@pytest.fixture
def menu(pos):
    """Adds three products to the offline POS catalog"""
    return {
        'combo': pos.catalog.add("Combo de Perros", Decimal("6.50"), "Combos"),
        'burger': pos.catalog.add("Wooper", Decimal("5.00"), "Hamburguesas"),
        'soda': pos.catalog.add("Refresco 1L", Decimal("2.50"), "Bebidas"),
    }
