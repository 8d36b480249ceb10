"""
Response Builder

Turns winning priced rules into quoted shipping services.

Fields are overlaid in a fixed order, lowest precedence first:

    service entry:  label/service_code defaults -> catalog entry fields
    shipping line:  defaults -> rule presentation fields -> computed prices
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from custom_shipping.modules.shipping.rules import PricedRule
from custom_shipping.schemas.shipping import (
    ApplicationConfig,
    ServiceMeta,
    ShippingLine,
    ShippingRule,
    ShippingService,
)

logger = logging.getLogger(__name__)

DEFAULT_DELIVERY_TIME = 20

# Rule fields only used to select and price rules, never shown to the buyer
FILTER_ONLY_FIELDS = frozenset({
    "service_code",
    "zip_range",
    "min_amount",
    "max_cubic_weight",
    "excedent_weight_cost",
    "amount_tax",
})


def explicit_fields(model: BaseModel, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Fields actually present in the input (declared + extra), minus exclude."""
    excluded = set(exclude)
    fields = {
        name: getattr(model, name)
        for name in type(model).model_fields
        if name in model.model_fields_set and name not in excluded
    }
    for name, value in (model.model_extra or {}).items():
        if name not in excluded:
            fields[name] = value
    return fields


def rule_presentation_fields(rule: ShippingRule) -> Dict[str, Any]:
    """Configured rule fields that belong in the shipping line."""
    return explicit_fields(rule, exclude=FILTER_ONLY_FIELDS)


def build_shipping_line(
    priced: PricedRule,
    origin: Dict[str, Any],
    destination: Optional[Dict[str, Any]],
    default_delivery_time: Any = DEFAULT_DELIVERY_TIME,
) -> ShippingLine:
    line: Dict[str, Any] = {
        "from": origin,
        "to": destination,
        "delivery_time": default_delivery_time,
        "price": 0,
        "total_price": 0,
    }
    for name, value in rule_presentation_fields(priced.rule).items():
        # A null rule field never replaces a default
        if value is None and name in line:
            continue
        line[name] = value
    line["price"] = priced.price
    line["total_price"] = priced.total_price
    return ShippingLine.model_validate(line)


def build_shipping_service(
    priced: PricedRule,
    config: ApplicationConfig,
    origin: Dict[str, Any],
    destination: Optional[Dict[str, Any]],
    default_delivery_time: Any = DEFAULT_DELIVERY_TIME,
) -> ShippingService:
    """
    Merge catalog metadata and the priced rule into a service entry.

    Args:
        priced: Winning rule for a service code
        config: Merchant config (service catalog lookup)
        origin: Origin address dict, zip already normalized
        destination: Destination address dict as received
        default_delivery_time: Used when the rule sets no delivery_time
    """
    code = priced.service_code
    entry: Dict[str, Any] = {}
    if code is not None:
        entry.update(label=code, service_code=code)

    service = config.find_service(code)
    if service is not None:
        for name, value in explicit_fields(service).items():
            # Unusable label/service_code/carrier keep the rule code defaults
            if value is None and name in ServiceMeta.model_fields:
                continue
            entry[name] = value

    entry["shipping_line"] = build_shipping_line(
        priced, origin, destination, default_delivery_time
    )
    return ShippingService.model_validate(entry)


def build_shipping_services(
    winners: Iterable[PricedRule],
    config: ApplicationConfig,
    origin: Dict[str, Any],
    destination: Optional[Dict[str, Any]],
    default_delivery_time: Any = DEFAULT_DELIVERY_TIME,
) -> List[ShippingService]:
    """One service entry per winning rule, order preserved."""
    return [
        build_shipping_service(priced, config, origin, destination, default_delivery_time)
        for priced in winners
    ]
