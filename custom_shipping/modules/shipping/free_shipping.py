"""
Free Shipping Scanner

Finds the order amount from which free shipping applies to a destination.

A rule offers free shipping when it matches the zip, costs exactly 0, does not
opt out with disable_free_shipping_from and adds no excess-weight or tax cost.
A qualifying rule without min_amount means free shipping for any order (0).
Otherwise the highest qualifying min_amount is reported.
"""
import logging
from typing import Iterable, Optional

from custom_shipping.schemas.shipping import ShippingRule

logger = logging.getLogger(__name__)


def offers_free_shipping(rule: ShippingRule, destination_zip: str) -> bool:
    """True if the rule is a zero-cost rule for this destination."""
    return (
        rule.matches_zip(destination_zip)
        and rule.total_price == 0
        and not rule.disable_free_shipping_from
        and not (rule.excedent_weight_cost is not None and rule.excedent_weight_cost > 0)
        and not (rule.amount_tax is not None and rule.amount_tax > 0)
    )


def find_free_shipping_from(
    rules: Iterable[ShippingRule],
    destination_zip: str,
) -> Optional[float]:
    """
    Free shipping threshold, or None when no rule offers free shipping.

    NOTE: the highest min_amount wins among conditional rules. Confirm with
    product before changing it to the lowest.
    """
    threshold: Optional[float] = None
    for rule in rules:
        if not offers_free_shipping(rule, destination_zip):
            continue
        if not rule.min_amount:
            # Unconditional free shipping can't be beaten
            return 0.0
        if threshold is None or rule.min_amount > threshold:
            threshold = rule.min_amount

    if threshold is not None:
        logger.debug(f"Free shipping from {threshold} for zip '{destination_zip}'")
    return threshold
