# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class RatingIn(BaseModel):
    rate: float | None = None
    count: int | None = None


class ProductIn(BaseModel):
    """Product as delivered by the external feed."""

    id: int = Field(..., gt=0)
    title: str
    price: Decimal = Field(..., ge=0)
    description: str | None = None
    category: str | None = None
    image: str | None = None
    rating: RatingIn = Field(default_factory=RatingIn)


class ProductOut(BaseModel):
    id: int
    title: str
    price: Decimal
    description: str | None = None
    category: str | None = None
    image: str | None = None
    rate: float | None = None
    rating_count: int | None = None

    model_config = ConfigDict(from_attributes=True)


class CartAddIn(BaseModel):
    """Schema for adding a product to the cart."""

    user_id: str | None = None
    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")


class CartAddOut(BaseModel):
    message: str
    cart_item_id: int
    qty: int
    created: bool


class CartLineOut(BaseModel):
    """Cart line joined with the catalog data needed for display."""

    cart_id: int
    user_id: str
    product_id: int
    qty: int
    title: str
    price: Decimal
    image: str | None = None


class MessageOut(BaseModel):
    message: str


class CheckoutIn(BaseModel):
    """
    Customer data for checkout. Name and email are validated by the
    checkout service, not here, so the error kind stays the same for
    every caller.
    """

    user_id: str | None = None
    customer_name: str = ""
    customer_email: str = ""


class ReceiptItemOut(BaseModel):
    name: str
    qty: int
    price: Decimal


class ReceiptOut(BaseModel):
    order_id: int
    customer_name: str
    customer_email: str
    total: Decimal
    timestamp: datetime
    items: List[ReceiptItemOut]

    model_config = ConfigDict(from_attributes=True)


class OrderLineOut(BaseModel):
    product_id: int
    qty: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    customer_name: str
    customer_email: str
    total: Decimal
    created_at: datetime
    lines: List[OrderLineOut]

    model_config = ConfigDict(from_attributes=True)
