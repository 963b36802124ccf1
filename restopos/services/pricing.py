"""
Cart pricing.

Pure functions over already-resolved products, so totals can be computed and
tested without a database. A line's unit price is frozen into the order at
creation; later catalog changes never reach existing orders.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

log = logging.getLogger("restopos.pricing")


@dataclass
class PricedLine:
    product_id: str
    quantity: int
    unit_price: Decimal
    modifiers: List[str] = field(default_factory=list)
    notes: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def modifier_adjustment(product, modifier_names: Iterable[str]) -> Decimal:
    """
    Sums the price adjustments of the named modifiers found on `product`.
    Names the product does not offer add nothing.
    """
    by_name = {m.name: Decimal(m.price_adjust) for m in product.modifiers}
    adjustment = Decimal("0")
    for name in modifier_names:
        if name in by_name:
            adjustment += by_name[name]
        else:
            log.warning(f"Modifier '{name}' is not offered for product {product.id}; priced at 0.")
    return adjustment


def unit_price(product, modifier_names: Iterable[str]) -> Decimal:
    return Decimal(product.price) + modifier_adjustment(product, modifier_names)


def price_cart(items: Sequence, products: Dict[str, object]) -> Tuple[List[PricedLine], Decimal]:
    """
    Prices every cart line against `products` (keyed by product id).
    Returns the priced lines and their summed total, delivery fee excluded.
    """
    lines = []
    total = Decimal("0")
    for item in items:
        product = products[item.product_id]
        line = PricedLine(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=unit_price(product, item.modifiers),
            modifiers=list(item.modifiers),
            notes=item.notes,
        )
        total += line.line_total
        lines.append(line)
    return lines, total
