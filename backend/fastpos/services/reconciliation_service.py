"""
Reconciliation Service - revenue, expenses, profit and cash cut

Author: TM3
Date: 2026-10-19
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from fastpos.domain.expense import Expense, ExpenseCategory
from fastpos.domain.order import PaymentMethod, Sale
from fastpos.domain.report import CashCut, ReconciliationReport
from fastpos.services.currency_service import CurrencyConverter

Day = Union[date, datetime, str, None]


def normalize_day(day: Day) -> Optional[str]:
    """date / datetime / 'YYYY-MM-DD...' -> 'YYYY-MM-DD' (None stays None)"""
    if day is None or day == "":
        return None
    if isinstance(day, datetime):
        return day.date().isoformat()
    if isinstance(day, date):
        return day.isoformat()
    return str(day)[:10]


def in_day_range(day: str, start_day: Optional[str], end_day: Optional[str]) -> bool:
    """
    Inclusive range check on plain YYYY-MM-DD strings

    Comparing the strings (not timestamps) keeps a sale made at 23:59 local
    time in its own day whatever the server's timezone.
    """
    if start_day and day < start_day:
        return False
    if end_day and day > end_day:
        return False
    return True


class ReconciliationEngine:
    """
    Computes the cash cut from point-in-time snapshots of the ledgers

    Bolívar buckets always use each sale's own `exchange_rate_at_sale`,
    never the current rate, so a past period reports the same figures no
    matter how the rate moved since. This is a computed summary only; no
    posting is made anywhere.
    """

    @staticmethod
    def filter_sales(sales: Iterable[Sale], start_day: Day = None, end_day: Day = None) -> List[Sale]:
        start, end = normalize_day(start_day), normalize_day(end_day)
        return [sale for sale in sales if in_day_range(sale.sale_day, start, end)]

    @staticmethod
    def filter_expenses(expenses: Iterable[Expense], start_day: Day = None, end_day: Day = None) -> List[Expense]:
        start, end = normalize_day(start_day), normalize_day(end_day)
        return [expense for expense in expenses if in_day_range(expense.expense_day, start, end)]

    @staticmethod
    def cash_cut(sales: Iterable[Sale]) -> CashCut:
        """Per-method buckets for an already filtered set of sales"""
        usd_cash = usd_zelle = ves_mobile = ves_card = Decimal('0')
        mobile_usd = card_usd = Decimal('0')

        for sale in sales:
            if sale.payment_method == PaymentMethod.CASH:
                usd_cash += sale.total
            elif sale.payment_method == PaymentMethod.ZELLE:
                usd_zelle += sale.total
            elif sale.payment_method == PaymentMethod.MOBILE:
                local = CurrencyConverter.to_local(sale.total, sale.exchange_rate_at_sale)
                ves_mobile += local
                mobile_usd += CurrencyConverter.to_usd(local, sale.exchange_rate_at_sale)
            elif sale.payment_method == PaymentMethod.CARD:
                local = CurrencyConverter.to_local(sale.total, sale.exchange_rate_at_sale)
                ves_card += local
                card_usd += CurrencyConverter.to_usd(local, sale.exchange_rate_at_sale)

        return CashCut(
            usd_cash=usd_cash,
            usd_zelle=usd_zelle,
            ves_mobile=ves_mobile,
            ves_card=ves_card,
            mobile_usd=mobile_usd,
            card_usd=card_usd,
        )

    def report(
        self,
        sales: Iterable[Sale],
        expenses: Iterable[Expense],
        start_day: Day = None,
        end_day: Day = None
    ) -> ReconciliationReport:
        """
        Reconciliation report for [start_day, end_day]

        Args:
            sales: Sales snapshot
            expenses: Expenses snapshot
            start_day: First day included (open when None)
            end_day: Last day included (open when None)

        Returns:
            ReconciliationReport with totals and the cash cut
        """
        filtered_sales = self.filter_sales(sales, start_day, end_day)
        filtered_expenses = self.filter_expenses(expenses, start_day, end_day)

        total_revenue = sum((sale.total for sale in filtered_sales), Decimal('0'))
        total_expenses = sum((expense.amount for expense in filtered_expenses), Decimal('0'))
        total_losses = sum(
            (expense.amount for expense in filtered_expenses if expense.category == ExpenseCategory.LOSS),
            Decimal('0'),
        )

        return ReconciliationReport(
            start_day=normalize_day(start_day),
            end_day=normalize_day(end_day),
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            total_losses=total_losses,
            net_profit=total_revenue - total_expenses,
            sales_count=len(filtered_sales),
            expenses_count=len(filtered_expenses),
            per_method=self.cash_cut(filtered_sales),
        )
