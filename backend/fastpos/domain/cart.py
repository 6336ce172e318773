"""
Cart - in-progress order at the register

Transient: lives only until checkout.
"""
from decimal import Decimal
from typing import Dict, Optional, Tuple

from fastpos.core.exceptions import DomainValidationError
from fastpos.domain.order import CartItem
from fastpos.domain.product import Product


class Cart:
    """Ordered collection of cart lines keyed by product ID"""

    def __init__(self):
        self._lines: Dict[str, CartItem] = {}

    def add(self, product: Product, quantity: int = 1) -> CartItem:
        """Add a product, or bump its quantity if it's already in the cart"""
        if quantity < 1:
            raise DomainValidationError("quantity must be at least 1")

        current = self._lines.get(product.id)
        if current:
            line = current.model_copy(update={'quantity': current.quantity + quantity})
        else:
            line = CartItem.from_product(product, quantity)
        self._lines[product.id] = line
        return line

    def set_quantity(self, product_id: str, quantity: int) -> Optional[CartItem]:
        """Set a line's quantity; zero or less removes the line"""
        current = self._lines.get(product_id)
        if current is None:
            return None
        if quantity < 1:
            del self._lines[product_id]
            return None
        line = current.model_copy(update={'quantity': quantity})
        self._lines[product_id] = line
        return line

    def increment(self, product_id: str) -> Optional[CartItem]:
        current = self._lines.get(product_id)
        if current is None:
            return None
        return self.set_quantity(product_id, current.quantity + 1)

    def decrement(self, product_id: str) -> Optional[CartItem]:
        current = self._lines.get(product_id)
        if current is None:
            return None
        return self.set_quantity(product_id, current.quantity - 1)

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    @property
    def items(self) -> Tuple[CartItem, ...]:
        return tuple(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def subtotal(self) -> Decimal:
        """USD subtotal (no taxes or discounts, so also the total)"""
        return sum((line.line_total for line in self._lines.values()), Decimal('0'))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def total_local(self, rate: Decimal) -> Decimal:
        """Bolívar total at the given rate"""
        return self.subtotal * rate

    def checkout(self, ledger, payment_method, customer_name: Optional[str] = None, route_to_kitchen: bool = True):
        """
        Turn the cart into a sale and empty it

        Args:
            ledger: OrderLedger that records the sale
            payment_method: PaymentMethod used
            customer_name: Optional label for the kitchen queue
            route_to_kitchen: False for direct delivery (sale starts completed)

        Returns:
            The created Sale
        """
        if self.is_empty:
            raise DomainValidationError("Cannot checkout an empty cart")

        sale = ledger.create_sale(
            self.items,
            self.subtotal,
            payment_method,
            customer_name=customer_name,
            route_to_kitchen=route_to_kitchen,
        )
        self.clear()
        return sale
