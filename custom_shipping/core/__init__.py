from custom_shipping.core.config import settings
from custom_shipping.core.exceptions import (
    QuoteBaseError,
    ShippingError,
    ShippingQuoteError,
    MissingOriginZipError,
)
