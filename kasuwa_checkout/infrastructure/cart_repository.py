from decimal import Decimal

from loguru import logger

from kasuwa_checkout.domain.cart import Cart, CartItem
from kasuwa_checkout.infrastructure.api_client import (
    KasuwaApiClient,
    map_response,
    unwrap_api_response,
)


class CartRepository:
    """Reads and clears the signed-in shopper's cart."""

    CART_PATH = "/cart"

    def __init__(self, client: KasuwaApiClient) -> None:
        self._client = client

    async def get_cart(self) -> Cart:
        body = await self._client.get(self.CART_PATH)
        cart = map_response(self.CART_PATH, self._map, unwrap_api_response(body))
        logger.debug(
            f"Cart {cart.id}: {cart.total_items} item(s), total {cart.total_amount}"
        )
        return cart

    async def clear_cart(self) -> None:
        # The endpoint acknowledges with a message and no data
        body = await self._client.delete(self.CART_PATH)
        unwrap_api_response(body, allow_empty=True)

    @staticmethod
    def _map(node: dict) -> Cart:
        """Map a raw ``CartDto`` to a ``Cart`` domain object."""
        items = [
            CartItem(
                id=item["id"],
                product_id=item["productId"],
                quantity=item["quantity"],
                unit_price=item["unitPrice"],
                total_price=item.get(
                    "totalPrice", Decimal(str(item["unitPrice"])) * item["quantity"]
                ),
                product_name=(item.get("product") or {}).get("name"),
                variant=item.get("productVariant"),
            )
            for item in node.get("items") or []
        ]

        total_amount = node.get("totalAmount")
        if total_amount is None:
            total_amount = sum((i.total_price for i in items), Decimal(0))

        total_items = node.get("totalItems")
        if total_items is None:
            total_items = sum(i.quantity for i in items)

        return Cart(
            id=node.get("id"),
            items=items,
            total_amount=total_amount,
            total_items=total_items,
        )
