"""
Tests for application settings validation.
"""
import pytest

from custom_shipping.core.config import DEFAULT_CORS_ORIGINS, Settings


def test_debug_forbidden_in_production():
    with pytest.raises(ValueError):
        Settings(ENVIRONMENT="production", DEBUG=True)


def test_debug_allowed_in_development():
    assert Settings(ENVIRONMENT="development", DEBUG=True).DEBUG is True


@pytest.mark.parametrize("divisor", [0, -6000])
def test_divisor_must_be_positive(divisor):
    with pytest.raises(ValueError):
        Settings(ENVIRONMENT="development", SHIPPING_CUBIC_WEIGHT_DIVISOR=divisor)


@pytest.mark.parametrize(
    "value, expected",
    [
        ('["https://a.example", "https://b.example"]', ["https://a.example", "https://b.example"]),
        ("https://a.example, https://b.example", ["https://a.example", "https://b.example"]),
        ("", DEFAULT_CORS_ORIGINS),
    ],
)
def test_cors_origins_parsing(value, expected):
    assert Settings(ENVIRONMENT="development", CORS_ORIGINS=value).CORS_ORIGINS == expected


def test_shipping_defaults():
    settings = Settings(ENVIRONMENT="development")
    assert settings.SHIPPING_DEFAULT_DELIVERY_TIME == 20
    assert settings.SHIPPING_CUBIC_WEIGHT_DIVISOR == 6000
    assert settings.LOG_LEVEL == settings.LOG_LEVEL.upper()
