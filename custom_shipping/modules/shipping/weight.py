"""
Cart Weight Calculator

Derives the billable weight of a cart and the order amount used for rule
thresholds and percentage taxes.

Per item the billable weight is the larger of:
    physical weight - weight.value converted to kilograms
    cubic weight    - (C x L x A) / 6000 with sides in centimeters

Items without usable dimensions have a cubic weight of 1 kg, so every item
weighs at least 1 kg per unit.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from custom_shipping.schemas.shipping import QuoteItem

logger = logging.getLogger(__name__)

# Conversion factors to kilograms
WEIGHT_UNITS: Dict[str, float] = {
    "kg": 1.0,
    "g": 1 / 1000,
    "mg": 1 / 1000000,
}

# Conversion factors to centimeters
DIMENSION_UNITS: Dict[str, float] = {
    "cm": 1.0,
    "m": 100.0,
    "mm": 1 / 10,
}

CUBIC_WEIGHT_DIVISOR = 6000.0


@dataclass(frozen=True)
class CartTotals:
    """Billable weight (kg) and order amount of a cart."""
    weight: float
    amount: float


def physical_weight(item: QuoteItem) -> float:
    """Item unit weight in kg. Missing value or unknown unit gives 0."""
    weight = item.weight
    if weight is None or not weight.value:
        return 0.0
    return weight.value * WEIGHT_UNITS.get(weight.unit, 0.0)


def cubic_weight(item: QuoteItem, divisor: float = CUBIC_WEIGHT_DIVISOR) -> float:
    """
    Item unit volumetric weight in kg.

    Each side is summed across its entries (normalized to cm), side sums are
    multiplied, and a product above 1 is divided by the divisor. A product of
    1 or less (tiny items, no dimensions, only unknown units) yields 1.
    """
    result = 1.0
    if not item.dimensions:
        return result

    side_sums: Dict[str, float] = {}
    for side, dimension in item.dimensions.items():
        if dimension is None or not dimension.value:
            continue
        centimeters = dimension.value * DIMENSION_UNITS.get(dimension.unit, 0.0)
        if centimeters:
            side_sums[side] = side_sums.get(side, 0.0) + centimeters

    for length in side_sums.values():
        if length:
            result *= length

    if result <= 1:
        return 1.0
    return result / divisor


def item_weight(item: QuoteItem, divisor: float = CUBIC_WEIGHT_DIVISOR) -> float:
    """Billable weight for the item line: quantity x max(physical, cubic)."""
    quantity = item.quantity if item.quantity is not None else 1
    return quantity * max(physical_weight(item), cubic_weight(item, divisor))


def order_amount(items: Optional[Iterable[QuoteItem]], subtotal: Optional[float] = None) -> float:
    """Subtotal when given (and non-zero), else sum of price x quantity."""
    if subtotal:
        return subtotal
    amount = 0.0
    for item in items or ():
        price = item.price if item.price is not None else 0
        quantity = item.quantity if item.quantity is not None else 1
        amount += price * quantity
    return amount


def summarize_cart(
    items: Optional[Iterable[QuoteItem]],
    subtotal: Optional[float] = None,
    divisor: float = CUBIC_WEIGHT_DIVISOR,
) -> CartTotals:
    """Total billable weight and order amount for a cart."""
    items = list(items or ())
    weight = sum(item_weight(item, divisor) for item in items)
    amount = order_amount(items, subtotal)
    logger.debug(f"Cart summary: {len(items)} items, weight={weight:.3f}kg, amount={amount:.2f}")
    return CartTotals(weight=weight, amount=amount)
