"""
Backup Service - export and import of the full POS state

Import is all-or-nothing: the document is parsed and validated
completely before any ledger is touched.

Author: TM3
Date: 2026-10-19
"""
import json
import logging
from typing import Any, Dict, Union

from pydantic import ValidationError

from fastpos.core.exceptions import BackupValidationError, InvalidExchangeRateError
from fastpos.domain.backup import BACKUP_VERSION, BackupDocument, BackupSummary
from fastpos.services import events as ev
from fastpos.services.ledger import local_now

logger = logging.getLogger(__name__)


class BackupService:
    """Serializes catalog, sales, expenses and the current rate"""

    def __init__(self, catalog, orders, expenses, rates, sync, event_bus, clock=None):
        self.catalog = catalog
        self.orders = orders
        self.expenses = expenses
        self.rates = rates
        self.sync = sync
        self.events = event_bus
        self._clock = clock or local_now

    def export_backup(self) -> Dict[str, Any]:
        """
        Build the backup document

        Returns:
            {version, timestamp, products, sales, expenses, exchangeRate}
            with camelCase sale fields and float amounts
        """
        return {
            'version': BACKUP_VERSION,
            'timestamp': self._clock().isoformat(),
            'products': [product.to_dict() for product in self.catalog.list_products()],
            'sales': [self._sale_to_backup(sale) for sale in self.orders.list_sales()],
            'expenses': [expense.to_dict() for expense in self.expenses.list_expenses()],
            'exchangeRate': float(self.rates.rate),
        }

    def export_json(self, indent: int = 2) -> str:
        return json.dumps(self.export_backup(), indent=indent, ensure_ascii=False)

    @staticmethod
    def _sale_to_backup(sale) -> Dict[str, Any]:
        return {
            'id': sale.id,
            'orderNumber': sale.order_number,
            'date': sale.date.isoformat(),
            'items': [item.to_dict() for item in sale.items],
            'total': float(sale.total),
            'paymentMethod': sale.payment_method.value,
            'exchangeRate': float(sale.exchange_rate_at_sale),
            'status': sale.status.value,
            'customerName': sale.customer_name,
        }

    @staticmethod
    def parse(document: Union[str, bytes, Dict[str, Any]]) -> BackupDocument:
        """
        Validate a backup document without applying it

        Raises:
            BackupValidationError: not JSON, not an object, products/sales
                missing or null, or any record malformed
        """
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except ValueError as e:
                raise BackupValidationError(f"Backup is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise BackupValidationError("Backup must be a JSON object")

        for key in ('products', 'sales'):
            if not isinstance(document.get(key), list):
                raise BackupValidationError(f"Backup is missing the '{key}' array")

        try:
            backup = BackupDocument.model_validate(document)
        except ValidationError as e:
            raise BackupValidationError(f"Backup has invalid records: {e.error_count()} errors") from e

        for key, records in (('products', backup.products), ('sales', backup.sales), ('expenses', backup.expenses or [])):
            ids = [record.id for record in records]
            if len(ids) != len(set(ids)):
                raise BackupValidationError(f"Backup has duplicate ids in '{key}'")

        return backup

    def import_backup(self, document: Union[str, bytes, Dict[str, Any]]) -> BackupSummary:
        """
        Replace products, sales and expenses with a backup's contents

        The records are written to the local store only; they are not pushed
        to the remote store. The backup's exchange rate is applied when it
        is a valid positive number.

        Raises:
            BackupValidationError: nothing was modified
        """
        backup = self.parse(document)
        expenses = backup.expenses or []

        self.sync.restore(self.catalog, backup.products)
        self.sync.restore(self.orders, backup.sales)
        self.sync.restore(self.expenses, expenses)

        rate_applied = False
        if backup.exchange_rate is not None:
            try:
                self.rates.set_manual(backup.exchange_rate)
                rate_applied = True
            except InvalidExchangeRateError:
                logger.warning(f"Ignoring invalid exchange rate in backup: {backup.exchange_rate}")

        summary = BackupSummary(
            products=len(backup.products),
            sales=len(backup.sales),
            expenses=len(expenses),
            exchange_rate_applied=rate_applied,
        )
        logger.info(
            f"Backup imported: {summary.products} products, {summary.sales} sales, {summary.expenses} expenses"
        )
        self.events.publish(ev.STATE_IMPORTED, **summary.model_dump())
        return summary
