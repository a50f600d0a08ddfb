from decimal import Decimal

from pydantic import BaseModel, Field


class CartItem(BaseModel):
    id: int
    product_id: int
    quantity: int = Field(..., ge=1)
    unit_price: Decimal
    total_price: Decimal  # quantity * unit_price, computed server-side
    product_name: str | None = None
    variant: str | None = None  # e.g. "Size: L"


class Cart(BaseModel):
    """Read-through copy of the shopper's cart as returned by the cart API."""

    id: int | None = None
    items: list[CartItem] = Field(default_factory=list)
    total_amount: Decimal = Decimal(0)
    total_items: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items
