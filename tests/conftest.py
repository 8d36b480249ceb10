"""
Pytest configuration and fixtures for custom shipping tests.
"""
import os
import pytest
from typing import Any, Dict

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SHIPPING_ORIGIN_ZIP"] = ""

from custom_shipping.schemas.shipping import (
    ApplicationConfig,
    QuoteItem,
    QuoteRequest,
    ShippingRule,
)


@pytest.fixture
def make_rule():
    """Build a ShippingRule from keyword fields."""
    def _make_rule(**fields: Any) -> ShippingRule:
        return ShippingRule.model_validate(fields)
    return _make_rule


@pytest.fixture
def make_item():
    """Build a cart item; weight in kg and dimensions in cm unless given."""
    def _make_item(
        price: float = 10.0,
        quantity: float = 1,
        weight_kg: float = None,
        dimensions_cm: Dict[str, float] = None,
        **extra: Any,
    ) -> QuoteItem:
        data: Dict[str, Any] = {"price": price, "quantity": quantity, **extra}
        if weight_kg is not None:
            data["weight"] = {"value": weight_kg, "unit": "kg"}
        if dimensions_cm is not None:
            data["dimensions"] = {
                side: {"value": value, "unit": "cm"} for side, value in dimensions_cm.items()
            }
        return QuoteItem.model_validate(data)
    return _make_item


@pytest.fixture
def sample_rules() -> list:
    """Typical merchant rule set: two services, regional pricing and free shipping."""
    return [
        {
            "service_code": "PAC",
            "zip_range": {"min": 1000000, "max": 19999999},
            "total_price": 15.0,
            "delivery_time": {"days": 5, "working_days": True},
        },
        {
            "service_code": "PAC",
            "total_price": 25.0,
            "delivery_time": {"days": 10, "working_days": True},
        },
        {
            "service_code": "SEDEX",
            "total_price": 40.0,
            "max_cubic_weight": 10,
            "excedent_weight_cost": 3.0,
            "delivery_time": {"days": 2, "working_days": True},
        },
        {
            "service_code": "PAC",
            "zip_range": {"min": 1000000, "max": 19999999},
            "min_amount": 300,
            "total_price": 0,
        },
    ]


@pytest.fixture
def sample_services() -> list:
    """Service catalog matching sample_rules."""
    return [
        {"service_code": "PAC", "label": "Economy", "carrier": "Correios"},
        {"service_code": "SEDEX", "label": "Express", "carrier": "Correios", "carrier_doc_number": "34028316000103"},
    ]


@pytest.fixture
def sample_config(sample_rules, sample_services) -> ApplicationConfig:
    return ApplicationConfig.model_validate({
        "shipping_rules": sample_rules,
        "services": sample_services,
        "zip": "01310-100",
    })


@pytest.fixture
def sample_params() -> QuoteRequest:
    """Request to a zip inside the PAC regional range with one 2kg item."""
    return QuoteRequest.model_validate({
        "to": {"zip": "04567-000", "name": "Buyer", "street": "Rua A", "number": 10},
        "items": [
            {
                "product_id": "p1",
                "price": 50.0,
                "quantity": 2,
                "weight": {"value": 2, "unit": "kg"},
                "dimensions": {
                    "width": {"value": 20, "unit": "cm"},
                    "height": {"value": 20, "unit": "cm"},
                    "length": {"value": 20, "unit": "cm"},
                },
            }
        ],
    })


@pytest.fixture
def sample_body(sample_rules, sample_services) -> Dict[str, Any]:
    """Full module request body as sent by the platform."""
    return {
        "params": {
            "to": {"zip": "04567-000", "name": "Buyer"},
            "items": [
                {
                    "product_id": "p1",
                    "price": 50.0,
                    "quantity": 2,
                    "weight": {"value": 2, "unit": "kg"},
                }
            ],
        },
        "application": {
            "_id": "app-1",
            "data": {"services": sample_services},
            "hidden_data": {"shipping_rules": sample_rules, "zip": "01310-100"},
        },
    }
