"""
Order Domain Models

Sales, their line items, payment methods and the fulfillment state machine.

Author: TM3
Date: 2026-10-19
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fastpos.domain.product import Product


class PaymentMethod(str, Enum):
    """How the customer paid"""
    CASH = "cash"
    CARD = "card"
    MOBILE = "mobile"
    ZELLE = "zelle"


class OrderStatus(str, Enum):
    """Fulfillment status of a sale"""
    PENDING = "pending"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

ACTIVE_STATUSES: FrozenSet[OrderStatus] = frozenset({OrderStatus.PENDING, OrderStatus.READY})


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """Check a status change against the transition table"""
    return new in ALLOWED_TRANSITIONS[current]


class CartItem(BaseModel):
    """
    Cart line - a product snapshot plus quantity

    Copied by value into the sale at checkout.
    """

    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Product name at sale time")
    price: Decimal = Field(..., description="Unit price (USD) at sale time", ge=0)
    category: str = Field("", description="Product category")
    quantity: int = Field(..., description="Units", ge=1)

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartItem":
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            category=product.category,
            quantity=quantity,
        )

    @property
    def line_total(self) -> Decimal:
        """price x quantity (USD)"""
        return self.price * self.quantity

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['price'] = float(self.price)
        return data


def items_total(items) -> Decimal:
    """Sum of price x quantity over cart items"""
    return sum((item.line_total for item in items), Decimal('0'))


class Sale(BaseModel):
    """
    Sale domain model - a ledger entry created once at checkout

    Only `status` changes after creation. `exchange_rate_at_sale` is the
    rate in effect when the sale was created and is used for every later
    bolívar conversion of this sale.

    Fields:
        id: Permanent unique ID
        order_number: Sequential number within the sale's calendar day
        date: Creation timestamp (local time, with offset)
        items: Line item snapshots
        total: USD total (sum of price x quantity)
        payment_method: cash, card, mobile or zelle
        exchange_rate_at_sale: VES per USD at creation
        status: pending, ready, completed or cancelled
        customer_name: Display label for the kitchen queue
    """

    id: str = Field(..., description="Sale ID")
    order_number: int = Field(..., alias="orderNumber", description="Daily order number", ge=1)
    date: datetime = Field(..., description="Creation timestamp")
    items: Tuple[CartItem, ...] = Field(..., description="Line items")
    total: Decimal = Field(..., description="Total (USD)", ge=0)
    payment_method: PaymentMethod = Field(..., alias="paymentMethod", description="Payment method")
    exchange_rate_at_sale: Decimal = Field(..., alias="exchangeRate", description="VES per USD at sale time", gt=0)
    status: OrderStatus = Field(OrderStatus.COMPLETED, description="Fulfillment status")
    customer_name: str = Field("Cliente", alias="customerName", description="Customer label")

    model_config = ConfigDict(frozen=True, from_attributes=True, populate_by_name=True)

    @field_validator('date')
    @classmethod
    def _assume_local_time(cls, value: datetime) -> datetime:
        # Timestamps without offset are taken as local time
        return value if value.tzinfo else value.astimezone()

    @property
    def sale_day(self) -> str:
        """Calendar day as a plain YYYY-MM-DD string"""
        return self.date.isoformat()[:10]

    @property
    def total_local(self) -> Decimal:
        """Total in bolívares at the sale's own rate"""
        return self.total * self.exchange_rate_at_sale

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_active(self) -> bool:
        """Still in the kitchen queue"""
        return self.status in ACTIVE_STATUSES

    def with_status(self, status: OrderStatus) -> "Sale":
        """Copy of this sale with a new status (everything else untouched)"""
        return self.model_copy(update={'status': status})

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Uses snake_case keys, float amounts and an ISO date.
        """
        return {
            'id': self.id,
            'order_number': self.order_number,
            'date': self.date.isoformat(),
            'items': [item.to_dict() for item in self.items],
            'total': float(self.total),
            'payment_method': self.payment_method.value,
            'exchange_rate_at_sale': float(self.exchange_rate_at_sale),
            'status': self.status.value,
            'customer_name': self.customer_name,
            'total_local': float(self.total_local),
            'item_count': self.item_count,
        }


def resolve_customer_name(customer_name: Optional[str], default_name: str) -> str:
    """Customer label, defaulted when absent or blank"""
    if customer_name is None or not customer_name.strip():
        return default_name
    return customer_name.strip()
