"""
Shipping Schemas for the calculate-shipping module

Pydantic models for the module request body, the merchant app config and the
quote response.

Malformed optional values are treated as unset instead of failing the quote.
Numeric fields only accept finite numbers; strings, booleans and NaN become None.
"""
import math
import re
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer


def as_number(value: Any) -> Optional[float]:
    """Return value if it is a finite int/float, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def normalize_zip(value: Optional[str]) -> str:
    """Strip everything but digits from a zip code."""
    if not value:
        return ""
    return re.sub(r"\D", "", value)


# ==================== Merchant Config Schemas ====================


class ZipRange(BaseModel):
    """Inclusive destination zip range. Missing or zero bounds are open."""
    model_config = ConfigDict(extra="ignore")

    min: Optional[int] = None
    max: Optional[int] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def parse_bound(cls, v):
        if isinstance(v, str):
            digits = normalize_zip(v)
            return int(digits) if digits else None
        number = as_number(v)
        return int(number) if number is not None else None

    def contains(self, zip_code: str) -> bool:
        """Check a digits-only zip against the range. Empty zip always matches."""
        if not zip_code:
            return True
        value = int(zip_code)
        return (not self.min or value >= self.min) and (not self.max or value <= self.max)


class ShippingRule(BaseModel):
    """
    A merchant shipping rule.

    Extra fields (delivery_time, posting_deadline, ...) are kept and end up in
    the quoted shipping line.
    """
    model_config = ConfigDict(extra="allow")

    zip_range: Optional[ZipRange] = None
    service_code: Optional[str] = None
    min_amount: Optional[float] = None
    max_cubic_weight: Optional[float] = None
    excedent_weight_cost: Optional[float] = None
    amount_tax: Optional[float] = None
    total_price: Optional[float] = None
    price: Optional[float] = None
    disable_free_shipping_from: bool = False

    @field_validator("zip_range", mode="before")
    @classmethod
    def parse_zip_range(cls, v):
        return v if isinstance(v, dict) else None

    @field_validator("service_code", mode="before")
    @classmethod
    def parse_service_code(cls, v):
        return v if isinstance(v, str) else None

    @field_validator(
        "min_amount",
        "max_cubic_weight",
        "excedent_weight_cost",
        "amount_tax",
        "total_price",
        "price",
        mode="before",
    )
    @classmethod
    def parse_number(cls, v):
        return as_number(v)

    @field_validator("disable_free_shipping_from", mode="before")
    @classmethod
    def parse_flag(cls, v):
        return bool(v)

    def matches_zip(self, zip_code: str) -> bool:
        """Rules without a zip range match every destination."""
        return self.zip_range is None or self.zip_range.contains(zip_code)


class ServiceMeta(BaseModel):
    """Service catalog entry, merged into the quoted service by code."""
    model_config = ConfigDict(extra="allow")

    service_code: Optional[str] = None
    label: Optional[str] = None
    carrier: Optional[str] = None

    @field_validator("service_code", "label", "carrier", mode="before")
    @classmethod
    def parse_text(cls, v):
        return v if isinstance(v, str) else None


class ApplicationConfig(BaseModel):
    """Merged `application.data` + `application.hidden_data`."""
    model_config = ConfigDict(extra="allow")

    shipping_rules: List[ShippingRule] = Field(default_factory=list)
    services: Optional[List[ServiceMeta]] = None
    zip: Optional[str] = None

    @field_validator("shipping_rules", mode="before")
    @classmethod
    def drop_invalid_rules(cls, v):
        # Non-object entries are ignored, not rejected
        if not isinstance(v, list):
            return []
        return [rule for rule in v if isinstance(rule, dict)]

    @field_validator("services", mode="before")
    @classmethod
    def drop_invalid_services(cls, v):
        if not isinstance(v, list):
            return None
        return [service for service in v if isinstance(service, dict)]

    @field_validator("zip", mode="before")
    @classmethod
    def parse_zip(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v if isinstance(v, str) else None

    def find_service(self, service_code: Optional[str]) -> Optional[ServiceMeta]:
        """First catalog entry with the given code, if a catalog is configured."""
        if self.services is None:
            return None
        for service in self.services:
            if service.service_code == service_code:
                return service
        return None


class Application(BaseModel):
    """The installed app object sent by the platform."""
    model_config = ConfigDict(extra="allow")

    data: Dict[str, Any] = Field(default_factory=dict)
    hidden_data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", "hidden_data", mode="before")
    @classmethod
    def default_empty(cls, v):
        return v if isinstance(v, dict) else {}

    def merged_config(self) -> ApplicationConfig:
        """Hidden data wins over public data."""
        return ApplicationConfig.model_validate({**self.data, **self.hidden_data})


# ==================== Quote Request Schemas ====================


class Measure(BaseModel):
    """A value with a unit (weight: kg/g/mg, dimension: cm/m/mm)."""
    model_config = ConfigDict(extra="allow")

    value: Optional[float] = None
    unit: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def parse_value(cls, v):
        return as_number(v)

    @field_validator("unit", mode="before")
    @classmethod
    def parse_unit(cls, v):
        return v if isinstance(v, str) else None


class QuoteItem(BaseModel):
    """Cart item. Missing price counts as 0, missing quantity as 1."""
    model_config = ConfigDict(extra="allow")

    price: Optional[float] = None
    quantity: Optional[float] = None
    weight: Optional[Measure] = None
    dimensions: Optional[Dict[str, Optional[Measure]]] = None

    @field_validator("price", "quantity", mode="before")
    @classmethod
    def parse_number(cls, v):
        return as_number(v)

    @field_validator("weight", mode="before")
    @classmethod
    def parse_weight(cls, v):
        return v if isinstance(v, dict) else None

    @field_validator("dimensions", mode="before")
    @classmethod
    def parse_dimensions(cls, v):
        if not isinstance(v, dict):
            return None
        return {side: (d if isinstance(d, dict) else None) for side, d in v.items()}


class Address(BaseModel):
    """Origin/destination address. Everything but the zip is passed through."""
    model_config = ConfigDict(extra="allow")

    zip: Optional[str] = None

    @field_validator("zip", mode="before")
    @classmethod
    def parse_zip(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v if isinstance(v, str) else None


class QuoteRequest(BaseModel):
    """Calculate-shipping params."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    from_: Optional[Address] = Field(None, alias="from")
    to: Optional[Address] = None
    items: Optional[List[QuoteItem]] = None
    subtotal: Optional[float] = None
    service_code: Optional[str] = None

    @field_validator("subtotal", mode="before")
    @classmethod
    def parse_subtotal(cls, v):
        return as_number(v)

    @field_validator("service_code", mode="before")
    @classmethod
    def parse_service_code(cls, v):
        return v if isinstance(v, str) else None


class CalculateShippingBody(BaseModel):
    """Module request body: {params, application}."""
    model_config = ConfigDict(extra="allow")

    params: QuoteRequest = Field(default_factory=QuoteRequest)
    application: Application = Field(default_factory=Application)


# ==================== Quote Response Schemas ====================


class ShippingLine(BaseModel):
    """Quoted shipping line. Rule presentation fields are kept as extras."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    from_: Dict[str, Any] = Field(..., alias="from")
    to: Optional[Dict[str, Any]] = None
    delivery_time: Any = 20
    price: float = 0
    total_price: float = 0


class ShippingService(BaseModel):
    """
    One quoted service, at most one per service code.

    label/service_code/carrier are only emitted when the builder set them.
    """
    model_config = ConfigDict(extra="allow")

    label: Optional[str] = None
    service_code: Optional[str] = None
    carrier: Optional[str] = None
    shipping_line: ShippingLine

    @model_serializer(mode="wrap")
    def omit_unset_metadata(self, handler):
        data = handler(self)
        for name in ("label", "service_code", "carrier"):
            if name not in self.model_fields_set:
                data.pop(name, None)
        return data


class QuoteResponse(BaseModel):
    """Calculate-shipping response."""
    shipping_services: List[ShippingService] = Field(default_factory=list)
    free_shipping_from_value: Optional[float] = None

    @model_serializer(mode="wrap")
    def omit_missing_threshold(self, handler):
        data = handler(self)
        if self.free_shipping_from_value is None:
            data.pop("free_shipping_from_value", None)
        return data

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation with aliases applied. Nulls inside lines are kept."""
        return self.model_dump(by_alias=True)


class ErrorResponse(BaseModel):
    """Client error body."""
    error: str
    message: str
