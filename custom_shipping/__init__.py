"""Rule-based shipping quote service for e-commerce storefronts."""

__version__ = "1.0.0"
