"""
Shipping Module

Rule-based shipping quotes:
- weight: billable cart weight (physical vs. cubic) and order amount
- rules: rule eligibility, pricing and cheapest-per-service selection
- free_shipping: free shipping threshold for a destination
- response_builder: quoted service entries
- calculator: the calculate_shipping pipeline
"""
from custom_shipping.modules.shipping.calculator import calculate_shipping
from custom_shipping.modules.shipping.rules import PricedRule
from custom_shipping.modules.shipping.weight import CartTotals

__all__ = [
    "calculate_shipping",
    "PricedRule",
    "CartTotals",
]
