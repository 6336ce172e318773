"""
Expense Ledger - expenses and losses

Author: TM3
Date: 2026-10-19
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple, Union

from fastpos.core.exceptions import DomainValidationError
from fastpos.domain.expense import Expense, ExpenseCategory
from fastpos.services import events as ev
from fastpos.services.ledger import Ledger, new_id

logger = logging.getLogger(__name__)


def _positive_amount(amount) -> Decimal:
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise DomainValidationError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite() or value <= 0:
        raise DomainValidationError("Amount must be positive")
    return value


class ExpenseLedger(Ledger):
    """Flat CRUD over expenses; deletion is permanent"""

    collection = "expenses"
    remote_order_by = "date"
    remote_descending = True
    remote_limited = True

    def __init__(self, repository, sync, event_bus, rates=None, clock=None):
        super().__init__(repository, sync, event_bus, clock)
        self.rates = rates

    def add(self, amount, description: str, category: Union[ExpenseCategory, str] = ExpenseCategory.EXPENSE) -> Expense:
        """
        Record an expense in USD

        Raises:
            DomainValidationError: non-positive amount, blank description or
                unknown category
        """
        amount = _positive_amount(amount)

        description = (description or "").strip()
        if not description:
            raise DomainValidationError("Description is required")

        try:
            category = ExpenseCategory(category)
        except ValueError as e:
            raise DomainValidationError(f"Unknown expense category: {category!r}") from e

        expense = Expense(
            id=new_id(),
            date=self.now(),
            amount=amount,
            description=description,
            category=category,
        )

        with self._lock:
            self._records[expense.id] = expense

        self.sync.record_insert(self, expense)
        logger.info(f"Expense added: {expense.amount} USD ({expense.category.value}) - {expense.description}")
        self.events.publish(ev.EXPENSE_ADDED, expense=expense.to_dict())
        return expense

    def add_in_local_currency(self, amount_local, description: str,
                              category: Union[ExpenseCategory, str] = ExpenseCategory.EXPENSE) -> Expense:
        """Record an expense entered in bolívares, converted at the current rate"""
        if self.rates is None:
            raise DomainValidationError("No exchange rate available")
        amount_usd = self.rates.to_usd(_positive_amount(amount_local))
        return self.add(amount_usd, description, category)

    def delete(self, expense_id: str) -> Optional[Expense]:
        """
        Delete an expense permanently

        Returns:
            The deleted expense, or None if the ID was unknown (no-op)
        """
        with self._lock:
            expense = self._records.pop(expense_id, None)

        if expense is None:
            logger.debug(f"Delete of unknown expense {expense_id} ignored")
            return None

        self.sync.record_delete(self, expense_id)
        logger.info(f"Expense deleted: {expense.description} ({expense.amount} USD)")
        self.events.publish(ev.EXPENSE_DELETED, expense_id=expense_id)
        return expense

    def list_expenses(self) -> Tuple[Expense, ...]:
        """All expenses, newest first"""
        return tuple(sorted(self.snapshot(), key=lambda expense: expense.date, reverse=True))
