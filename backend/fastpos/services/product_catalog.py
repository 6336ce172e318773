"""
Product Catalog - plain product CRUD

Author: TM3
Date: 2026-10-19
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from fastpos.core.exceptions import DomainValidationError
from fastpos.domain.product import DEFAULT_PRODUCTS, Product
from fastpos.services import events as ev
from fastpos.services.ledger import Ledger, new_id

logger = logging.getLogger(__name__)


def _price(value) -> Decimal:
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise DomainValidationError(f"Invalid price: {value!r}") from e
    if not price.is_finite() or price < 0:
        raise DomainValidationError("Price can't be negative")
    return price


class ProductCatalog(Ledger):
    """Catalog products; unique id is the only invariant"""

    collection = "products"
    remote_order_by = "name"

    def add(self, name: str, price, category: str = "") -> Product:
        name = (name or "").strip()
        if not name:
            raise DomainValidationError("Product name is required")

        product = Product(id=new_id(), name=name, price=_price(price), category=(category or "").strip())

        with self._lock:
            self._records[product.id] = product

        self.sync.record_insert(self, product)
        logger.info(f"Product added: {product.name} ({product.price} USD)")
        self.events.publish(ev.PRODUCT_ADDED, product=product.to_dict())
        return product

    def update(self, product_id: str, name: Optional[str] = None, price=None,
               category: Optional[str] = None) -> Optional[Product]:
        """
        Change a product's fields

        Returns:
            Updated product, or None if the ID is unknown
        """
        changes = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise DomainValidationError("Product name is required")
            changes['name'] = name
        if price is not None:
            changes['price'] = _price(price)
        if category is not None:
            changes['category'] = category.strip()

        with self._lock:
            product = self._records.get(product_id)
            if product is None:
                return None
            updated = product.model_copy(update=changes)
            self._records[product_id] = updated

        self.sync.record_update(self, updated)
        self.events.publish(ev.PRODUCT_UPDATED, product=updated.to_dict())
        return updated

    def delete(self, product_id: str) -> Optional[Product]:
        """Remove a product; unknown IDs are ignored"""
        with self._lock:
            product = self._records.pop(product_id, None)

        if product is None:
            return None

        self.sync.record_delete(self, product_id)
        logger.info(f"Product deleted: {product.name}")
        self.events.publish(ev.PRODUCT_DELETED, product_id=product_id)
        return product

    def list_products(self) -> List[Product]:
        """Products sorted by name"""
        return sorted(self.snapshot(), key=lambda product: product.name.lower())

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.get(product_id)

    def seed_defaults(self) -> List[Product]:
        """Add the default catalog when there are no products at all"""
        if len(self):
            return []
        logger.info("Empty catalog - seeding default products")
        return [self.add(**data) for data in DEFAULT_PRODUCTS]
