"""
Stock ledger: the only code that moves product stock.

Invoices match products by id. Conversions match by product name, which is
what production staff pick from; an id is accepted as a fallback so callers
can use the same key as invoices.
"""
import logging
from typing import List, Optional

from schemas import ConversionLog, Invoice, Product

logger = logging.getLogger(__name__)


class StockLedger:
    def find_by_id(self, products: List[Product], product_id: str) -> Optional[Product]:
        return next((p for p in products if p.id == product_id), None)

    def find_by_name(self, products: List[Product], name: str) -> Optional[Product]:
        product = next((p for p in products if p.name == name), None)
        if product is None:
            product = self.find_by_id(products, name)
        return product

    def adjust(self, product: Product, delta: int) -> None:
        product.stock += delta

    def apply_invoice(self, products: List[Product], invoice: Invoice) -> None:
        """Decrement stock for every line. Stock is allowed to go negative."""
        for item in invoice.items:
            product = self.find_by_id(products, item.product_id)
            if product is None:
                logger.warning("Invoice %s: unknown product %r, stock untouched", invoice.id, item.product_id)
                continue
            self.adjust(product, -item.quantity)

    def apply_conversion(self, products: List[Product], log: ConversionLog) -> bool:
        source = self.find_by_name(products, log.from_product)
        target = self.find_by_name(products, log.to_product)
        if source is None or target is None:
            logger.warning(
                "Conversion %s: could not resolve %r -> %r, stock untouched",
                log.id, log.from_product, log.to_product,
            )
            return False
        self.adjust(source, -log.from_quantity)
        self.adjust(target, log.to_quantity)
        return True
