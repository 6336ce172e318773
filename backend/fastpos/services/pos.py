"""
Point of Sale - application container

Wires the ledgers, the rate provider, the reconciliation engine and the
sync coordinator. Front ends (the HTTP API, tests, scripts) talk only to
this object: commands in, snapshots and events out.

Author: TM3
Date: 2026-10-19
"""
import logging
from typing import Optional

from fastpos.connectors.dolarapi_connector import DolarApiConnector
from fastpos.connectors.supabase_connector import SupabaseConnector
from fastpos.core.config import Settings, settings as default_settings
from fastpos.core.database import create_local_engine, create_session_factory, get_supabase_client
from fastpos.domain.cart import Cart
from fastpos.domain.report import ReconciliationReport
from fastpos.repositories import ExpenseRepository, ProductRepository, SaleRepository, SettingsRepository
from fastpos.services.backup_service import BackupService
from fastpos.services.currency_service import CurrencyConverter, ExchangeRateProvider
from fastpos.services.events import EventBus
from fastpos.services.expense_ledger import ExpenseLedger
from fastpos.services.order_ledger import OrderLedger
from fastpos.services.product_catalog import ProductCatalog
from fastpos.services.reconciliation_service import Day, ReconciliationEngine
from fastpos.services.sync_service import SyncCoordinator

logger = logging.getLogger(__name__)


class PointOfSale:
    """Single-terminal POS session"""

    def __init__(
        self,
        session_factory,
        settings: Optional[Settings] = None,
        remote: Optional[SupabaseConnector] = None,
        rate_source=None,
        clock=None
    ):
        """
        Args:
            session_factory: SQLAlchemy sessionmaker for the local store
            settings: Settings (defaults to the environment)
            remote: SupabaseConnector, or None for offline mode
            rate_source: Quote source with async fetch_rate()
            clock: Callable returning the current local datetime
        """
        self.settings = settings or default_settings
        self.events = EventBus()
        self.converter = CurrencyConverter()

        self.sync = SyncCoordinator(
            remote=remote,
            event_bus=self.events,
            insert_failure_policy=self.settings.SYNC_INSERT_FAILURE_POLICY,
            fetch_limit=self.settings.REMOTE_FETCH_LIMIT,
        )

        self.rates = ExchangeRateProvider(
            source=rate_source or DolarApiConnector(
                self.settings.EXCHANGE_RATE_API_URL,
                timeout=self.settings.EXCHANGE_RATE_TIMEOUT,
            ),
            settings_repository=SettingsRepository(session_factory),
            default_rate=self.settings.DEFAULT_EXCHANGE_RATE,
            event_bus=self.events,
        )

        self.catalog = ProductCatalog(ProductRepository(session_factory), self.sync, self.events, clock)
        self.orders = OrderLedger(
            SaleRepository(session_factory),
            self.sync,
            self.events,
            self.rates,
            clock=clock,
            default_customer_name=self.settings.DEFAULT_CUSTOMER_NAME,
        )
        self.expenses = ExpenseLedger(ExpenseRepository(session_factory), self.sync, self.events, self.rates, clock)

        self.reconciliation = ReconciliationEngine()
        self.backup = BackupService(self.catalog, self.orders, self.expenses, self.rates, self.sync, self.events, clock)

    def start(self) -> "PointOfSale":
        """Load state (remote mirror or local store) and seed an empty catalog"""
        self.sync.load_initial_state()
        self.catalog.seed_defaults()
        logger.info(
            f"POS started ({self.sync.status.value}): {len(self.catalog)} products, "
            f"{len(self.orders)} sales, {len(self.expenses)} expenses, rate {self.rates.rate}"
        )
        return self

    def shutdown(self) -> None:
        self.sync.shutdown()

    def new_cart(self) -> Cart:
        return Cart()

    def cash_cut(self, start_day: Day = None, end_day: Day = None) -> ReconciliationReport:
        """Reconciliation report over the current snapshots of both ledgers"""
        return self.reconciliation.report(self.orders.list_sales(), self.expenses.list_expenses(), start_day, end_day)


def create_point_of_sale(settings: Optional[Settings] = None) -> PointOfSale:
    """
    Build a PointOfSale from configuration

    Missing Supabase credentials give an offline POS, never an error.
    """
    settings = settings or default_settings
    session_factory = create_session_factory(create_local_engine(settings.LOCAL_DATABASE_URL))

    client = get_supabase_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    remote = SupabaseConnector(client) if client is not None else None

    return PointOfSale(session_factory, settings=settings, remote=remote)
