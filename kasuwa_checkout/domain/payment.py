from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class PaymentMethod(StrEnum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    USSD = "ussd"


class PaymentMethodOption(BaseModel):
    """A selectable payment option shown on the payment step."""

    model_config = ConfigDict(frozen=True)

    id: PaymentMethod
    display_name: str
    description: str
    provider_name: str  # gateway that captures the payment


PAYMENT_METHODS: tuple[PaymentMethodOption, ...] = (
    PaymentMethodOption(
        id=PaymentMethod.CARD,
        display_name="Credit/Debit Card",
        description="Visa, Mastercard, Verve",
        provider_name="Paystack",
    ),
    PaymentMethodOption(
        id=PaymentMethod.BANK_TRANSFER,
        display_name="Bank Transfer",
        description="Direct bank transfer",
        provider_name="Flutterwave",
    ),
    PaymentMethodOption(
        id=PaymentMethod.USSD,
        display_name="USSD",
        description="Pay with *737# or *901#",
        provider_name="Paystack",
    ),
)


def get_payment_option(method: PaymentMethod) -> PaymentMethodOption:
    """Return the registry entry for ``method``."""
    return next(option for option in PAYMENT_METHODS if option.id == method)
