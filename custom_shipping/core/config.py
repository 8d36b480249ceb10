"""
Application configuration

Defaults are fail-safe for production:
- DEBUG defaults to False
- Runtime validation catches insecure or nonsensical configurations

Merchant shipping rules are NOT configured here: they arrive with each
request in `application.data` / `application.hidden_data`. These settings only
cover the service itself and the last-resort origin zip.
"""
import json
import os
import logging
from typing import List
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Default CORS origins
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "https://admin.e-com.plus",
]


class Settings(BaseSettings):
    # App - defaults are PRODUCTION safe
    APP_NAME: str = "custom_shipping"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON array or comma-separated string
    CORS_ORIGINS: List[str] = DEFAULT_CORS_ORIGINS

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            if not v or v.strip() == "":
                return DEFAULT_CORS_ORIGINS
            # Try JSON first
            if v.startswith("["):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Fallback to comma-separated
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper()

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_CALCULATE: str = "300/minute"

    # Shipping quote defaults
    # Used only when neither the request nor the app config has an origin zip
    SHIPPING_ORIGIN_ZIP: str = ""
    SHIPPING_DEFAULT_DELIVERY_TIME: int = 20
    SHIPPING_CUBIC_WEIGHT_DIVISOR: float = 6000.0

    @model_validator(mode="after")
    def validate_config(self):
        """Runtime validation to catch broken or insecure configurations."""
        errors = []

        if self.SHIPPING_CUBIC_WEIGHT_DIVISOR <= 0:
            errors.append(
                "SHIPPING_CUBIC_WEIGHT_DIVISOR must be positive "
                f"(got {self.SHIPPING_CUBIC_WEIGHT_DIVISOR})"
            )

        if self.ENVIRONMENT == "production":
            if self.DEBUG:
                errors.append(
                    "DEBUG=True is forbidden in production. "
                    "Set DEBUG=false or ENVIRONMENT=development"
                )

            cors_warnings = []
            for origin in self.CORS_ORIGINS:
                if origin == "*":
                    cors_warnings.append("Wildcard '*' CORS origin is insecure in production")
                elif "localhost" in origin or "127.0.0.1" in origin:
                    cors_warnings.append(f"Localhost CORS origin '{origin}' should be removed in production")

            if cors_warnings:
                logger.warning(
                    "CORS WARNINGS in production:\n" +
                    "\n".join(f"  - {w}" for w in cors_warnings)
                )

        if errors:
            raise ValueError(
                "CONFIGURATION ERRORS:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        return self

    class Config:
        env_file = ".env"
        case_sensitive = True


# Try to load settings, provide helpful error on failure
try:
    settings = Settings()
except Exception:
    # In development, allow fallback defaults
    if os.getenv("ENVIRONMENT", "development") == "development":
        logger.warning(
            "Settings validation failed, using development defaults. "
            "Check the .env file."
        )
        settings = Settings(ENVIRONMENT="development", DEBUG=False, SHIPPING_CUBIC_WEIGHT_DIVISOR=6000.0)
    else:
        raise
