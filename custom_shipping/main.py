"""
Custom Shipping Quote Service
FastAPI application entry point

- Calculate-shipping module endpoint
- Rate limiting with SlowAPI
- Error sanitization middleware
- Request id / duration headers
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from custom_shipping import __version__
from custom_shipping.api.routes import calculate_shipping
from custom_shipping.core.config import settings
from custom_shipping.core.error_handler import ErrorSanitizationMiddleware, shipping_error_handler
from custom_shipping.core.exceptions import ShippingError
from custom_shipping.core.rate_limit import limiter, rate_limit_exceeded_handler
from custom_shipping.core.request_context import RequestContextMiddleware

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Custom Shipping API",
    description="""
## Custom Shipping Quote API

Quotes shipping services from merchant-configured shipping rules.

### Rules
- Destination zip ranges, minimum order amounts and weight caps
- Excess weight surcharge and percentage tax on the order amount
- Cheapest rule per service code wins
- Free shipping threshold reported per destination
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(ShippingError, shipping_error_handler)

# Middleware runs in reverse order of registration
app.add_middleware(ErrorSanitizationMiddleware)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calculate_shipping.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": __version__,
        "environment": settings.ENVIRONMENT,
    }


logger.info(f"{settings.APP_NAME} {__version__} ready ({settings.ENVIRONMENT})")
