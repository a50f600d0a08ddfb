import time

from loguru import logger

from kasuwa_checkout.domain.order import OrderDraft, PlacedOrder
from kasuwa_checkout.infrastructure.api_client import (
    KasuwaApiClient,
    map_response,
    unwrap_api_response,
)


class OrderRepository:
    """Submits orders to the Kasuwa order API."""

    ORDERS_PATH = "/orders"

    def __init__(self, client: KasuwaApiClient) -> None:
        self._client = client

    async def create_order(self, draft: OrderDraft) -> PlacedOrder:
        """POST ``draft`` and return the created order's identifiers.

        Raises:
            ApiError: if the API rejects the order (validation, payment) or
                replies with something that is not an order.
        """
        payload = draft.model_dump(mode="json", by_alias=True, exclude_none=True)
        logger.debug(f"Creating order: {payload}")
        body = await self._client.post(self.ORDERS_PATH, payload)
        return map_response(self.ORDERS_PATH, self._map, unwrap_api_response(body))

    @staticmethod
    def _map(node: dict) -> PlacedOrder:
        """Map a raw ``OrderDto`` to a ``PlacedOrder``."""
        return PlacedOrder(
            order_id=node["id"],
            # fallback: older API builds omit the number on create
            order_number=node.get("orderNumber") or f"KAS-{int(time.time() * 1000)}",
            status=node.get("status"),
            payment_status=node.get("paymentStatus"),
            total_amount=node.get("totalAmount"),
        )
