"""In-memory stand-in for the Kasuwa REST API, served through ``httpx.MockTransport``."""

import json
from datetime import UTC, datetime
from decimal import Decimal

import httpx
from loguru import logger

from kasuwa_checkout.domain.payment import PaymentMethod
from kasuwa_checkout.domain.pricing import PricingPolicy, compute_totals

_REQUIRED_ADDRESS_FIELDS = ("addressLine1", "city", "state", "country")


def _envelope(data: object, message: str | None = None) -> dict:
    return {"success": True, "message": message, "data": data, "errors": []}


class MockKasuwaBackend:
    """Keeps one shopper's cart, addresses and orders in memory.

    Cart and address endpoints reply with the ``ApiResponseDto`` envelope;
    ``POST /orders`` replies with the bare order DTO, as the real API does.
    """

    def __init__(
        self,
        cart_items: list[dict] | None = None,
        addresses: list[dict] | None = None,
        pricing: PricingPolicy | None = None,
    ) -> None:
        self.cart_items: list[dict] = list(cart_items or [])
        self.addresses: list[dict] = list(addresses or [])
        self.orders: list[dict] = []
        self._pricing = pricing or PricingPolicy()

    @classmethod
    def seeded(cls) -> "MockKasuwaBackend":
        """Return a backend with a two-line cart and one default Lagos address."""
        return cls(
            cart_items=[
                {
                    "id": 1,
                    "productId": 101,
                    "quantity": 2,
                    "unitPrice": 6500,
                    "totalPrice": 13000,
                    "productVariant": "6 yards",
                    "product": {"name": "Ankara Fabric"},
                },
                {
                    "id": 2,
                    "productId": 205,
                    "quantity": 3,
                    "unitPrice": 3000,
                    "totalPrice": 9000,
                    "product": {"name": "Shea Butter 500g"},
                },
            ],
            addresses=[
                {
                    "id": 1,
                    "addressLine1": "12 Admiralty Way",
                    "addressLine2": "Lekki Phase 1",
                    "city": "Lagos",
                    "state": "Lagos",
                    "postalCode": "106104",
                    "country": "Nigeria",
                    "isDefault": True,
                }
            ],
        )

    # ------------------------------------------------------------------
    # Transport handler
    # ------------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        logger.debug(f"[Kasuwa] MOCK {request.method} {request.url}")

        if not request.headers.get("Authorization", "").startswith("Bearer "):
            return httpx.Response(401, json={"message": "Unauthorized"})

        resource = request.url.path.rstrip("/").rsplit("/", 1)[-1]
        routes = {
            ("GET", "cart"): self._get_cart,
            ("DELETE", "cart"): self._clear_cart,
            ("GET", "addresses"): self._get_addresses,
            ("POST", "addresses"): self._create_address,
            ("POST", "orders"): self._create_order,
        }
        handler = routes.get((request.method, resource))
        if handler is None:
            return httpx.Response(404, json={"message": f"No route for {request.url.path}"})
        return handler(request)

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def _cart_dto(self) -> dict:
        return {
            "id": 1,
            "userId": "customer",
            "totalItems": sum(i["quantity"] for i in self.cart_items),
            "totalAmount": sum(i["totalPrice"] for i in self.cart_items),
            "items": self.cart_items,
        }

    def _get_cart(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_envelope(self._cart_dto()))

    def _clear_cart(self, request: httpx.Request) -> httpx.Response:
        self.cart_items = []
        return httpx.Response(200, json={"message": "Cart cleared successfully"})

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def _get_addresses(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_envelope(self.addresses))

    def _create_address(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")

        missing = {
            field: [f"The {field} field is required."]
            for field in _REQUIRED_ADDRESS_FIELDS
            if not str(body.get(field) or "").strip()
        }
        if missing:
            return httpx.Response(
                400,
                json={"title": "One or more validation errors occurred.", "errors": missing},
            )

        if body.get("isDefault"):
            for existing in self.addresses:
                existing["isDefault"] = False

        address = {
            "id": max((a["id"] for a in self.addresses), default=0) + 1,
            "addressLine1": body["addressLine1"],
            "addressLine2": body.get("addressLine2"),
            "city": body["city"],
            "state": body["state"],
            "postalCode": body.get("postalCode"),
            "country": body["country"],
            "isDefault": bool(body.get("isDefault")),
        }
        self.addresses.append(address)
        return httpx.Response(201, json=_envelope(address, "Address created"))

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def _next_order_number(self) -> str:
        today = datetime.now(UTC).strftime("%Y%m%d")
        sequence = sum(1 for o in self.orders if o["orderNumber"].startswith(f"ORD-{today}"))
        return f"ORD-{today}-{sequence + 1:04d}"

    def _create_order(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        by_id = {a["id"]: a for a in self.addresses}

        if not self.cart_items:
            return httpx.Response(400, json="Cart is empty")
        if body.get("shippingAddressId") not in by_id:
            return httpx.Response(400, json="Shipping address not found")
        if body.get("billingAddressId", body["shippingAddressId"]) not in by_id:
            return httpx.Response(400, json="Billing address not found")
        if body.get("paymentMethod") not in {m.value for m in PaymentMethod}:
            return httpx.Response(400, json=f"Unsupported payment method: {body.get('paymentMethod')}")

        totals = compute_totals(
            Decimal(str(self._cart_dto()["totalAmount"])), self._pricing
        )
        order = {
            "id": len(self.orders) + 1,
            "orderNumber": self._next_order_number(),
            "status": "Pending",
            "paymentStatus": "Pending",
            "paymentMethod": body["paymentMethod"],
            "shippingAddress": by_id[body["shippingAddressId"]],
            "billingAddress": by_id[body.get("billingAddressId", body["shippingAddressId"])],
            "subtotal": float(totals.subtotal),
            "shippingAmount": float(totals.shipping),
            "taxAmount": float(totals.tax),
            "discountAmount": 0,
            "totalAmount": float(totals.total),
            "createdAt": datetime.now(UTC).isoformat(),
            "items": [dict(item) for item in self.cart_items],
            "notes": body.get("notes"),
        }
        self.orders.append(order)
        logger.info(f"[Kasuwa] MOCK order {order['orderNumber']} created")
        return httpx.Response(201, json=order)
