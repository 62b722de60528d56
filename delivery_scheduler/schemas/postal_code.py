"""Postal code API schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from delivery_scheduler.core.config import settings
from delivery_scheduler.schemas.rules import DeliveryArea


class CamelModel(BaseModel):
    """Request/response model exchanging camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostalCodeValidateRequest(CamelModel):
    postal_code: str
    shop_domain: str | None = None


class PostalCodeValidateResponse(CamelModel):
    postal_code: str
    is_valid: bool
    delivery_area: DeliveryArea | None = None
    error: str | None = None
    suggestions: list[str] = []


class AutocompleteRequest(CamelModel):
    partial_code: str
    shop_domain: str | None = None
    limit: int = Field(default_factory=lambda: settings.autocomplete_default_limit, ge=1, le=50)


class PostalCodeSuggestionRead(CamelModel):
    postal_code: str
    city: str
    province: str
    delivery_area: DeliveryArea


class AutocompleteResponse(CamelModel):
    suggestions: list[PostalCodeSuggestionRead]
