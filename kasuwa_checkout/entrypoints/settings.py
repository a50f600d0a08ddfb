from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

from kasuwa_checkout.domain.payment import PaymentMethod
from kasuwa_checkout.domain.pricing import PricingPolicy


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    KASUWA_API_BASE_URL: str = "https://localhost:7155/api"
    KASUWA_ACCESS_TOKEN: str | None = None
    KASUWA_USER_ID: str = "customer"
    KASUWA_USER_EMAIL: str | None = None
    # Serve the API from an in-memory backend instead of the network
    KASUWA_USE_MOCK_API: bool = True
    KASUWA_HTTP_TIMEOUT: float = 30.0

    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("10000")
    FLAT_SHIPPING_FEE: Decimal = Decimal("1500")
    VAT_RATE: Decimal = Decimal("0.075")

    CHECKOUT_PAYMENT_METHOD: PaymentMethod = PaymentMethod.CARD

    def pricing_policy(self) -> PricingPolicy:
        return PricingPolicy(
            free_shipping_threshold=self.FREE_SHIPPING_THRESHOLD,
            flat_shipping_fee=self.FLAT_SHIPPING_FEE,
            vat_rate=self.VAT_RATE,
        )


config = Config()
