from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .address import Address
from .payment import PaymentMethod


class SameAsShipping(BaseModel):
    """Billing goes to whatever address is selected for shipping."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["same_as_shipping"] = "same_as_shipping"


class DistinctBilling(BaseModel):
    """Billing goes to its own address; ``None`` until the shopper picks one."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["distinct"] = "distinct"
    address: Address | None = None


BillingSelection = SameAsShipping | DistinctBilling


class OrderDraft(BaseModel):
    """Create-order payload assembled from the checkout selections."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    shipping_address_id: int
    billing_address_id: int
    payment_method: PaymentMethod
    notes: str = ""


class PlacedOrder(BaseModel):
    """What the order API returns once an order is durably created."""

    order_id: int
    order_number: str  # human-readable, e.g. "ORD-20250916-0001"
    status: str | None = None
    payment_status: str | None = None
    total_amount: Decimal | None = None
