from enum import StrEnum


class CheckoutStep(StrEnum):
    """Stages of the checkout, in the order a shopper walks through them."""

    CART_REVIEW = "cart"
    SHIPPING = "shipping"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"

    @property
    def position(self) -> int:
        return list(CheckoutStep).index(self)

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    CheckoutStep.CART_REVIEW: "Cart Review",
    CheckoutStep.SHIPPING: "Shipping",
    CheckoutStep.PAYMENT: "Payment",
    CheckoutStep.CONFIRMATION: "Confirmation",
}
