import asyncio

import httpx
from loguru import logger

from kasuwa_checkout.application.checkout_workflow import CheckoutWorkflow
from kasuwa_checkout.domain.user import User
from kasuwa_checkout.entrypoints.executor import CheckoutExecutor
from kasuwa_checkout.entrypoints.mock_api import MockKasuwaBackend
from kasuwa_checkout.entrypoints.settings import config
from kasuwa_checkout.infrastructure.address_repository import AddressRepository
from kasuwa_checkout.infrastructure.api_client import KasuwaApiClient
from kasuwa_checkout.infrastructure.auth import StaticAuthContext
from kasuwa_checkout.infrastructure.cart_repository import CartRepository
from kasuwa_checkout.infrastructure.order_repository import OrderRepository

MOCK_ACCESS_TOKEN = "mock-token"


async def _run() -> None:
    access_token = config.KASUWA_ACCESS_TOKEN
    transport: httpx.AsyncBaseTransport | None = None
    if config.KASUWA_USE_MOCK_API:
        # To go live: set KASUWA_USE_MOCK_API=false and KASUWA_ACCESS_TOKEN.
        transport = httpx.MockTransport(MockKasuwaBackend.seeded().handle)
        access_token = access_token or MOCK_ACCESS_TOKEN
        logger.info("Using the in-memory Kasuwa API")

    auth = StaticAuthContext(
        user=User(id=config.KASUWA_USER_ID, email=config.KASUWA_USER_EMAIL),
        access_token=access_token,
    )

    async with httpx.AsyncClient(
        transport=transport, timeout=config.KASUWA_HTTP_TIMEOUT
    ) as http_client:
        # --- API layer ---
        api = KasuwaApiClient(http_client, config.KASUWA_API_BASE_URL, auth)

        # --- Checkout ---
        workflow = CheckoutWorkflow(
            auth=auth,
            carts=CartRepository(api),
            addresses=AddressRepository(api),
            orders=OrderRepository(api),
            pricing=config.pricing_policy(),
        )
        await CheckoutExecutor(workflow).run(
            payment_method=config.CHECKOUT_PAYMENT_METHOD
        )


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
