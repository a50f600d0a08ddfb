"""Display totals for the checkout, derived from the cart subtotal."""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel

_WHOLE_UNIT = Decimal("1")


class PricingPolicy(BaseModel):
    """Shipping and VAT rules, in naira."""

    free_shipping_threshold: Decimal = Decimal("10000")
    flat_shipping_fee: Decimal = Decimal("1500")
    vat_rate: Decimal = Decimal("0.075")


class Totals(BaseModel):
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    @property
    def free_shipping(self) -> bool:
        return self.shipping == 0

    @classmethod
    def zero(cls) -> "Totals":
        return cls(
            subtotal=Decimal(0), shipping=Decimal(0), tax=Decimal(0), total=Decimal(0)
        )


def compute_totals(subtotal: Decimal, policy: PricingPolicy | None = None) -> Totals:
    """Return shipping, VAT and grand total for ``subtotal``.

    - shipping is free once the subtotal reaches the threshold (inclusive)
    - VAT applies to the subtotal only, rounded half-up to whole naira
    """
    policy = policy or PricingPolicy()
    subtotal = Decimal(str(subtotal))

    shipping = (
        Decimal(0)
        if subtotal >= policy.free_shipping_threshold
        else policy.flat_shipping_fee
    )
    tax = (subtotal * policy.vat_rate).quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)

    return Totals(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=subtotal + shipping + tax,
    )


def format_price(amount: Decimal) -> str:
    """Format ``amount`` as naira without decimals, e.g. ``₦23,650``."""
    whole = Decimal(str(amount)).quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)
    sign = "-" if whole < 0 else ""
    return f"{sign}₦{abs(whole):,}"
