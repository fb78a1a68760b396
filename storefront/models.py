"""
Pydantic Models - Catalog products and cart API payloads

The cart backend has shipped two response dialects (the Spring service and
the development mock server), so the payload models accept either set of
field names and normalize them.
"""

from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import AliasChoices, AliasPath, BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.services.money import to_decimal as _to_decimal

ProductId = Union[int, str]
LineId = Union[int, str]


# ============================================================
# Catalog
# ============================================================

class Product(BaseModel):
    """Catalog product as supplied to the cart (owned by the catalog service)."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: ProductId
    name: str
    price: Decimal
    stock: int = Field(default=0, ge=0)
    image_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("image_url", "imageUrl"))

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


# ============================================================
# Cart API payloads
# ============================================================

class RemoteCartLine(BaseModel):
    """One line of a server cart."""
    model_config = ConfigDict(extra="ignore")

    line_id: LineId = Field(validation_alias=AliasChoices("cartItemId", "id", "lineId"))
    product_id: ProductId = Field(validation_alias=AliasChoices("productId", AliasPath("product", "id")))
    product_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("productName", AliasPath("product", "name"))
    )
    quantity: int
    unit_price: Decimal = Field(
        validation_alias=AliasChoices("priceAtAdd", "unitPrice", "price", AliasPath("product", "price"))
    )
    image_url: Optional[str] = Field(default=None, validation_alias=AliasPath("product", "imageUrl"))
    stock: Optional[int] = Field(default=None, validation_alias=AliasPath("product", "stock"))

    @field_validator("unit_price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)


class RemoteCartPayload(BaseModel):
    """
    Server cart.

    Mutations on the mock server answer with {"message": ..., "cart": {...}};
    the envelope is unwrapped before validation.
    """
    model_config = ConfigDict(extra="ignore")

    cart_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("cartId", "id"))
    user_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("userId", "user_id"))
    items: list[RemoteCartLine] = []
    total: Optional[Decimal] = Field(default=None, validation_alias=AliasChoices("totalPrice", "totalAmount"))

    @model_validator(mode="before")
    @classmethod
    def unwrap_envelope(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("cart"), dict):
            return data["cart"]
        return data

    @field_validator("cart_id", "user_id", mode="before")
    @classmethod
    def stringify_ids(cls, v):
        return None if v is None else str(v)

    @field_validator("items", mode="before")
    @classmethod
    def null_items_to_empty(cls, v):
        return [] if v is None else v

    @field_validator("total", mode="before")
    @classmethod
    def convert_total_to_decimal(cls, v):
        return None if v is None else _to_decimal(v)


class ErrorPayload(BaseModel):
    """Backend error body: {timestamp, status, error, message, path}."""
    model_config = ConfigDict(extra="ignore")

    status: Optional[int] = None
    error: Optional[str] = None
    message: Optional[str] = None
    path: Optional[str] = None

    @property
    def detail(self) -> Optional[str]:
        return self.message or self.error
