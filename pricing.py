from typing import Dict, Iterable, List, Optional

from schemas import InvoiceItem, InvoiceItemIn, PricingResponse

PRODUCT_PRICES: Dict[str, float] = {
    "cow-milk": 50,
    "buffalo-milk": 60,
    "curd": 80,
    "buttermilk": 40,
    "buffalo-ghee": 600,
    "cow-ghee": 700,
    "paneer": 350,
    "butter": 500,
    "mustard-oil": 150,
    "mawa": 400,
    "lassi": 50,
}


class InvoicePricingEngine:
    """Resolves unit prices from a fixed table and totals invoice lines.

    Prices supplied by callers are never trusted; every line is priced from
    the table at the moment the invoice is created.
    """

    def __init__(self, prices: Optional[Dict[str, float]] = None):
        self.prices: Dict[str, float] = dict(PRODUCT_PRICES if prices is None else prices)

    def unit_price(self, product_id: str) -> float:
        # Unknown products are sold at 0 rather than rejected
        return self.prices.get(product_id, 0)

    def set_price(self, product_id: str, price: float) -> None:
        self.prices[product_id] = price

    def price_items(self, items: Iterable[InvoiceItemIn]) -> List[InvoiceItem]:
        return [
            InvoiceItem(product_id=it.product_id, quantity=it.quantity, price=self.unit_price(it.product_id))
            for it in items
        ]

    def calculate_pricing(self, items: Iterable[InvoiceItemIn]) -> PricingResponse:
        priced = self.price_items(items)
        total = sum(it.quantity * it.price for it in priced)
        return PricingResponse(items=priced, total=total)
