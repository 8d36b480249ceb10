"""
Calculate Shipping

Entry point of the quote pipeline:

    rules present?        no  -> empty response
    free shipping scan
    destination present?  no  -> free shipping only
    origin zip resolved?  no  -> MissingOriginZipError (CALCULATE_ERR)
    items or subtotal?    no  -> free shipping only
    weight -> filter -> cheapest per service -> response

Stateless: config and request objects are only read, so a parsed config can be
shared between requests.

Usage:
    response = calculate_shipping(body.params, body.application.merged_config())
"""
import logging
from typing import Any, Dict, Optional

from custom_shipping.core.exceptions import MissingOriginZipError
from custom_shipping.modules.shipping.free_shipping import find_free_shipping_from
from custom_shipping.modules.shipping.response_builder import (
    DEFAULT_DELIVERY_TIME,
    build_shipping_services,
)
from custom_shipping.modules.shipping.rules import filter_rules, select_cheapest
from custom_shipping.modules.shipping.weight import CUBIC_WEIGHT_DIVISOR, summarize_cart
from custom_shipping.schemas.shipping import (
    ApplicationConfig,
    QuoteRequest,
    QuoteResponse,
    normalize_zip,
)

logger = logging.getLogger(__name__)


def resolve_origin_zip(
    params: QuoteRequest,
    config: ApplicationConfig,
    fallback_zip: str = "",
) -> str:
    """Request origin zip, then app config zip, then the service fallback."""
    if params.from_ is not None and params.from_.zip:
        return normalize_zip(params.from_.zip)
    if config.zip:
        return normalize_zip(config.zip)
    return normalize_zip(fallback_zip)


def origin_address(params: QuoteRequest, origin_zip: str) -> Dict[str, Any]:
    """Request origin (if any) with the normalized zip."""
    origin = params.from_.model_dump() if params.from_ is not None else {}
    origin["zip"] = origin_zip
    return origin


def calculate_shipping(
    params: QuoteRequest,
    config: ApplicationConfig,
    fallback_origin_zip: str = "",
    default_delivery_time: Any = DEFAULT_DELIVERY_TIME,
    cubic_weight_divisor: float = CUBIC_WEIGHT_DIVISOR,
) -> QuoteResponse:
    """
    Quote shipping services for a request.

    Args:
        params: Calculate-shipping params (origin, destination, cart, filters)
        config: Merged merchant app config
        fallback_origin_zip: Origin zip used when request and config have none
        default_delivery_time: delivery_time for rules that don't set one
        cubic_weight_divisor: Volumetric weight divisor

    Returns:
        QuoteResponse

    Raises:
        MissingOriginZipError: destination given but no origin zip resolvable
    """
    response = QuoteResponse()
    rules = config.shipping_rules
    if not rules:
        logger.debug("No shipping rules configured")
        return response

    destination_zip = normalize_zip(params.to.zip) if params.to is not None else ""
    response.free_shipping_from_value = find_free_shipping_from(rules, destination_zip)

    if params.to is None:
        # Can't price without a destination, free shipping info only
        return response

    origin_zip = resolve_origin_zip(params, config, fallback_origin_zip)
    if not origin_zip:
        logger.warning("Origin zip unresolved: missing on request and app config")
        raise MissingOriginZipError()

    if params.items is None and not params.subtotal:
        return response

    totals = summarize_cart(params.items, params.subtotal, cubic_weight_divisor)
    eligible = filter_rules(
        rules,
        destination_zip=destination_zip,
        service_code=params.service_code,
        amount=totals.amount,
        weight=totals.weight,
    )
    winners = select_cheapest(eligible, weight=totals.weight, amount=totals.amount)

    response.shipping_services = build_shipping_services(
        winners,
        config,
        origin=origin_address(params, origin_zip),
        destination=params.to.model_dump(exclude_unset=True),
        default_delivery_time=default_delivery_time,
    )

    logger.info(
        f"Quoted {len(response.shipping_services)} services "
        f"({len(eligible)}/{len(rules)} rules eligible) to zip '{destination_zip}', "
        f"weight={totals.weight:.3f}kg amount={totals.amount:.2f}"
    )
    return response
