from custom_shipping.schemas.shipping import (
    ShippingRule,
    ServiceMeta,
    ApplicationConfig,
    QuoteRequest,
    QuoteResponse,
    CalculateShippingBody,
)
