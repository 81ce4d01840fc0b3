from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Immutable model serialized with camelCase keys, as in the catalog files."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Money(_WireModel):
    currency_code: str = Field("", description="ISO 4217 currency code")
    units: int = Field(0, description="Whole units of the amount")
    nanos: int = Field(0, ge=-999_999_999, le=999_999_999, description="Nano units of the amount")


class Product(_WireModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    picture: str = Field("", description="Image reference")
    price_usd: Money = Field(default_factory=Money)
    categories: tuple[str, ...] = ()


class ListProductsResponse(_WireModel):
    products: tuple[Product, ...] = ()


class SearchProductsResponse(_WireModel):
    results: tuple[Product, ...] = ()


class HealthCheckResponse(_WireModel):
    status: str = "SERVING"


class ErrorResponse(BaseModel):
    code: str
    message: str
    product_id: str | None = None
