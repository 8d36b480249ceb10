"""
Custom Shipping Exception Hierarchy

Structured exception classes for the quote service. All exceptions carry a
machine-readable code, a human message and optional details so they can be
logged and serialized consistently.

Exception Hierarchy:
    QuoteBaseError
    └── ShippingError
        └── ShippingQuoteError
            └── MissingOriginZipError
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class QuoteBaseError(Exception):
    """
    Base exception for all custom shipping errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "QUOTE_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# SHIPPING ERRORS
# =============================================================================

class ShippingError(QuoteBaseError):
    """Base exception for shipping errors that are the caller's to fix."""
    default_code = "SHIPPING_ERROR"
    default_severity = "P2"


class ShippingQuoteError(ShippingError):
    """Quote could not be calculated."""
    default_code = "CALCULATE_ERR"
    default_severity = "P3"


class MissingOriginZipError(ShippingQuoteError):
    """
    No origin zip could be resolved from the request or the app config.

    This is a merchant misconfiguration; retrying the same request will not help.
    """
    default_message = "Zip code is unset on app hidden data (merchant must configure the app)"

    def __init__(self, message: Optional[str] = None, **kwargs):
        super().__init__(message or self.default_message, **kwargs)
