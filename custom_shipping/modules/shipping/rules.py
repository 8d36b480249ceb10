"""
Shipping Rule Filter and Aggregator

filter_rules()      - rules applicable to destination, service, amount and weight
price_rule()        - derived price for one rule (base + excess weight + tax)
select_cheapest()   - one winning rule per service code, cheapest first seen

Rules are never modified: pricing returns a new PricedRule.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from custom_shipping.schemas.shipping import ShippingRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedRule:
    """A rule together with its computed price for one quote."""
    rule: ShippingRule
    price: float
    total_price: float

    @property
    def service_code(self) -> Optional[str]:
        return self.rule.service_code


# =============================================================================
# FILTER
# =============================================================================

def is_eligible(
    rule: ShippingRule,
    destination_zip: str,
    service_code: Optional[str],
    amount: float,
    weight: float,
) -> bool:
    """
    Check every rule condition.

    A weight cap only excludes the rule when overage is not billed
    (excedent_weight_cost <= 0).
    """
    if service_code and service_code != rule.service_code:
        return False
    if not rule.matches_zip(destination_zip):
        return False
    if rule.min_amount and amount < rule.min_amount:
        return False
    if rule.max_cubic_weight:
        bills_overage = rule.excedent_weight_cost is not None and rule.excedent_weight_cost > 0
        if not bills_overage and weight > rule.max_cubic_weight:
            return False
    return True


def filter_rules(
    rules: Iterable[ShippingRule],
    destination_zip: str,
    service_code: Optional[str],
    amount: float,
    weight: float,
) -> List[ShippingRule]:
    """Rules eligible for this quote, in configured order."""
    return [
        rule for rule in rules
        if is_eligible(rule, destination_zip, service_code, amount, weight)
    ]


# =============================================================================
# AGGREGATE
# =============================================================================

def excess_weight_cost(rule: ShippingRule, weight: float) -> float:
    """Surcharge for weight above max_cubic_weight, 0 if not billed."""
    if not rule.excedent_weight_cost or rule.excedent_weight_cost <= 0:
        return 0.0
    if rule.max_cubic_weight is None or weight <= rule.max_cubic_weight:
        return 0.0
    return rule.excedent_weight_cost * (weight - rule.max_cubic_weight)


def amount_tax_cost(rule: ShippingRule, amount: float) -> float:
    """Percentage of the order amount."""
    if rule.amount_tax is None:
        return 0.0
    return rule.amount_tax * amount / 100


def price_rule(rule: ShippingRule, weight: float, amount: float) -> PricedRule:
    """
    Compute the quoted price of a rule.

    total_price = base total_price (0 if unset) + excess weight + tax
    price       = configured price, falling back to the base total_price
    """
    base = rule.total_price if rule.total_price is not None else 0.0
    price = rule.price if rule.price is not None else base
    total = base + excess_weight_cost(rule, weight) + amount_tax_cost(rule, amount)
    return PricedRule(rule=rule, price=price, total_price=total)


def select_cheapest(
    rules: Iterable[ShippingRule],
    weight: float,
    amount: float,
) -> List[PricedRule]:
    """
    Group priced rules by service code keeping the cheapest.

    Ties keep the first rule seen; groups come out in first-seen order.
    """
    by_code: Dict[Optional[str], PricedRule] = {}
    for rule in rules:
        priced = price_rule(rule, weight, amount)
        current = by_code.get(priced.service_code)
        if current is None or current.total_price > priced.total_price:
            by_code[priced.service_code] = priced

    logger.debug(f"Selected {len(by_code)} services from eligible rules")
    return list(by_code.values())
