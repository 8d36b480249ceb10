"""
Calculate Shipping Module Route

POST /ecom/modules/calculate-shipping

The platform sends {params, application}; the body is already validated
upstream. Merchant rules come from application.data / hidden_data.
"""
import logging

from fastapi import APIRouter, Request

from custom_shipping.core.config import settings
from custom_shipping.core.rate_limit import get_calculate_limit
from custom_shipping.modules.shipping import calculate_shipping
from custom_shipping.schemas.shipping import (
    CalculateShippingBody,
    ErrorResponse,
    QuoteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ecom/modules", tags=["modules"])


@router.post(
    "/calculate-shipping",
    response_model=QuoteResponse,
    responses={400: {"model": ErrorResponse}},
)
@get_calculate_limit()
def calculate_shipping_module(request: Request, body: CalculateShippingBody):
    """
    Quote shipping services for the cart in `params`.

    Returns 400 CALCULATE_ERR when no origin zip is configured.
    """
    config = body.application.merged_config()
    request_id = getattr(request.state, "request_id", "-")
    logger.debug(
        f"[{request_id}] calculate-shipping: {len(config.shipping_rules)} rules, "
        f"service_code={body.params.service_code!r}"
    )
    return calculate_shipping(
        body.params,
        config,
        fallback_origin_zip=settings.SHIPPING_ORIGIN_ZIP,
        default_delivery_time=settings.SHIPPING_DEFAULT_DELIVERY_TIME,
        cubic_weight_divisor=settings.SHIPPING_CUBIC_WEIGHT_DIVISOR,
    )
