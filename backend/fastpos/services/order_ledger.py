"""
Order Ledger - sales, daily order numbers and the fulfillment state machine

Author: TM3
Date: 2026-10-19
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple, Union

from fastpos.domain.order import (
    CartItem,
    OrderStatus,
    PaymentMethod,
    Sale,
    can_transition,
    items_total,
    resolve_customer_name,
)
from fastpos.services import events as ev
from fastpos.services.ledger import Ledger, new_id

logger = logging.getLogger(__name__)


class OrderLedger(Ledger):
    """
    Append-mostly store of sales

    Sales are never deleted here; after creation only their status moves:

        pending -> ready -> completed
        pending | ready -> cancelled

    Any other requested change is ignored (logged and published as
    `sale_status_rejected`).
    """

    collection = "sales"
    remote_order_by = "date"
    remote_descending = True
    remote_limited = True

    def __init__(self, repository, sync, event_bus, rates, clock=None, default_customer_name: str = "Cliente"):
        """
        Args:
            repository: SaleRepository
            sync: SyncCoordinator
            event_bus: EventBus
            rates: ExchangeRateProvider read once per sale
            clock: Callable returning the current local datetime
            default_customer_name: Label used when no customer name is given
        """
        super().__init__(repository, sync, event_bus, clock)
        self.rates = rates
        self.default_customer_name = default_customer_name
        # Highest order number handed out per day; a rollback never lowers it
        self._issued_numbers: Dict[str, int] = {}

    def load(self, records: Iterable) -> None:
        with self._lock:
            super().load(records)
            self._issued_numbers = {}

    def _next_order_number(self, today: str) -> int:
        live = max((sale.order_number for sale in self._records.values() if sale.sale_day == today), default=0)
        number = max(live, self._issued_numbers.get(today, 0)) + 1
        self._issued_numbers = {today: number}
        return number

    # =========================================================================
    # Commands
    # =========================================================================

    def create_sale(
        self,
        items: Iterable[CartItem],
        total: Optional[Decimal],
        payment_method: Union[PaymentMethod, str],
        customer_name: Optional[str] = None,
        route_to_kitchen: bool = True
    ) -> Sale:
        """
        Record a checkout

        The order number follows the highest number issued today, so a
        sale rolled back after a failed remote insert leaves a gap and its
        number is never reused. The sale freezes the provider's rate at
        this instant. Routed to the kitchen it starts `pending`; direct
        delivery skips preparation and starts `completed`.

        Args:
            items: Cart lines (copied into the sale)
            total: USD total; computed from the items when None
            payment_method: cash, card, mobile or zelle
            customer_name: Optional label, defaulted when blank
            route_to_kitchen: Whether the order goes through preparation

        Returns:
            The new Sale
        """
        items = tuple(items)
        if total is None:
            total = items_total(items)

        status = OrderStatus.PENDING if route_to_kitchen else OrderStatus.COMPLETED
        exchange_rate = self.rates.rate

        with self._lock:
            now = self.now()
            today = now.isoformat()[:10]
            order_number = self._next_order_number(today)

            sale = Sale(
                id=new_id(),
                order_number=order_number,
                date=now,
                items=items,
                total=total,
                payment_method=PaymentMethod(payment_method),
                exchange_rate_at_sale=exchange_rate,
                status=status,
                customer_name=resolve_customer_name(customer_name, self.default_customer_name),
            )
            self._records[sale.id] = sale

        self.sync.record_insert(self, sale)
        logger.info(
            f"Sale #{sale.order_number} created: {sale.total} USD via {sale.payment_method.value} "
            f"at {sale.exchange_rate_at_sale} ({sale.status.value})"
        )
        self.events.publish(ev.SALE_CREATED, sale=sale.to_dict())
        return sale

    def update_status(self, sale_id: str, new_status: Union[OrderStatus, str]) -> Optional[Sale]:
        """
        Move a sale through the fulfillment state machine

        Args:
            sale_id: Sale ID
            new_status: Requested status

        Returns:
            The updated sale, the unchanged sale when the transition is not
            allowed, or None when the ID is unknown
        """
        new_status = OrderStatus(new_status)

        with self._lock:
            sale = self._records.get(sale_id)
            if sale is None:
                logger.debug(f"Status update for unknown sale {sale_id} ignored")
                return None

            if not can_transition(sale.status, new_status):
                rejected = True
                updated = sale
            else:
                rejected = False
                updated = sale.with_status(new_status)
                self._records[sale_id] = updated

        if rejected:
            logger.warning(
                f"Rejected status change {sale.status.value} -> {new_status.value} for order #{sale.order_number}"
            )
            self.events.publish(
                ev.SALE_STATUS_REJECTED,
                sale_id=sale_id,
                current=sale.status.value,
                requested=new_status.value,
            )
            return sale

        self.sync.record_update(self, updated, {'status': new_status.value})
        logger.info(f"Order #{updated.order_number}: {sale.status.value} -> {new_status.value}")
        self.events.publish(
            ev.SALE_STATUS_CHANGED,
            sale_id=sale_id,
            previous=sale.status.value,
            status=new_status.value,
        )
        return updated

    # =========================================================================
    # Queries
    # =========================================================================

    def list_sales(self) -> Tuple[Sale, ...]:
        """All sales, newest first"""
        return tuple(sorted(self.snapshot(), key=lambda sale: sale.date, reverse=True))

    def get_sale(self, sale_id: str) -> Optional[Sale]:
        return self.get(sale_id)

    def active_orders(self) -> List[Sale]:
        """Kitchen queue: pending and ready orders, oldest first"""
        return sorted((sale for sale in self.snapshot() if sale.is_active), key=lambda sale: sale.date)

    def sales_for_day(self, day: Union[date, str]) -> List[Sale]:
        """Sales of one calendar day in order-number order"""
        day = day.isoformat() if isinstance(day, date) else day
        return sorted(
            (sale for sale in self.snapshot() if sale.sale_day == day),
            key=lambda sale: sale.order_number,
        )
