"""Tests for the cart, address and order repositories using a mocked API client."""

import asyncio
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from kasuwa_checkout.domain.address import Address, AddressForm
from kasuwa_checkout.domain.cart import Cart
from kasuwa_checkout.domain.order import OrderDraft, PlacedOrder
from kasuwa_checkout.domain.payment import PaymentMethod
from kasuwa_checkout.infrastructure.address_repository import AddressRepository
from kasuwa_checkout.infrastructure.api_client import ApiError, KasuwaApiClient
from kasuwa_checkout.infrastructure.cart_repository import CartRepository
from kasuwa_checkout.infrastructure.order_repository import OrderRepository


def _make_cart_item_node(
    item_id: int = 1,
    product_id: int = 101,
    quantity: int = 2,
    unit_price: float = 6500.0,
    variant: str | None = None,
) -> dict:
    """Helper: build a raw ``CartItemDto``."""
    return {
        "id": item_id,
        "productId": product_id,
        "quantity": quantity,
        "unitPrice": unit_price,
        "totalPrice": unit_price * quantity,
        "productVariant": variant,
        "product": {"id": product_id, "name": "Ankara Fabric"},
    }


def _make_address_node(address_id: int = 1, is_default: bool = True) -> dict:
    """Helper: build a raw ``AddressDto``."""
    return {
        "id": address_id,
        "addressLine1": "12 Admiralty Way",
        "addressLine2": "",
        "city": "Lagos",
        "state": "Lagos",
        "postalCode": "106104",
        "country": "Nigeria",
        "isDefault": is_default,
    }


def _envelope(data) -> dict:
    return {"success": True, "message": None, "data": data, "errors": []}


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


def test_get_cart_maps_items_and_totals() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.get.return_value = _envelope(
        {
            "id": 3,
            "userId": "user-1",
            "totalItems": 2,
            "totalAmount": 13000.0,
            "items": [_make_cart_item_node(variant="6 yards")],
        }
    )

    cart = asyncio.run(CartRepository(client).get_cart())

    assert isinstance(cart, Cart)
    assert cart.id == 3
    assert cart.total_amount == Decimal("13000")
    assert cart.total_items == 2
    item = cart.items[0]
    assert item.product_id == 101
    assert item.unit_price == Decimal("6500")
    assert item.total_price == Decimal("13000")
    assert item.product_name == "Ankara Fabric"
    assert item.variant == "6 yards"
    client.get.assert_awaited_once_with("/cart")


def test_get_cart_derives_missing_aggregates() -> None:
    """totalAmount and totalItems are summed from the lines when absent."""
    client = MagicMock(spec=KasuwaApiClient)
    client.get.return_value = _envelope(
        {
            "items": [
                _make_cart_item_node(1, quantity=2, unit_price=6500.0),
                _make_cart_item_node(2, quantity=3, unit_price=3000.0),
            ]
        }
    )

    cart = asyncio.run(CartRepository(client).get_cart())

    assert cart.total_amount == Decimal("22000")
    assert cart.total_items == 5


def test_get_cart_with_no_items_is_empty() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.get.return_value = _envelope({"id": 3, "items": [], "totalAmount": 0})

    cart = asyncio.run(CartRepository(client).get_cart())

    assert cart.is_empty
    assert cart.total_items == 0


def test_get_cart_raises_on_failed_envelope() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.get.return_value = {"success": False, "message": "Cart not found"}

    with pytest.raises(ApiError, match="Cart not found"):
        asyncio.run(CartRepository(client).get_cart())


def test_get_cart_rejects_unmappable_items() -> None:
    """A line with zero quantity fails model validation and surfaces as ApiError."""
    client = MagicMock(spec=KasuwaApiClient)
    client.get.return_value = _envelope({"items": [_make_cart_item_node(quantity=0)]})

    with pytest.raises(ApiError, match="Unexpected response from /cart"):
        asyncio.run(CartRepository(client).get_cart())


def test_clear_cart_accepts_message_only_reply() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.delete.return_value = {"message": "Cart cleared successfully"}

    asyncio.run(CartRepository(client).clear_cart())

    client.delete.assert_awaited_once_with("/cart")


def test_clear_cart_propagates_api_errors() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.delete.side_effect = ApiError("Unauthorized", 401)

    with pytest.raises(ApiError):
        asyncio.run(CartRepository(client).clear_cart())


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


def test_get_addresses_preserves_order() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.get.return_value = _envelope(
        [_make_address_node(2, is_default=False), _make_address_node(1)]
    )

    addresses = asyncio.run(AddressRepository(client).get_addresses())

    assert [a.id for a in addresses] == [2, 1]
    assert all(isinstance(a, Address) for a in addresses)
    assert addresses[1].is_default
    # Blank optional fields come back as None
    assert addresses[0].address_line2 is None


def test_get_addresses_rejects_non_list_reply() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.get.return_value = _envelope(_make_address_node())

    with pytest.raises(ApiError, match="Unexpected response from /addresses"):
        asyncio.run(AddressRepository(client).get_addresses())


def test_create_address_posts_camel_case_payload() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.post.return_value = _envelope(_make_address_node(9, is_default=False))
    form = AddressForm(
        address_line1=" 12 Admiralty Way ",
        city="Lagos",
        state="Lagos",
        postal_code="106104",
    )

    address = asyncio.run(AddressRepository(client).create_address(form))

    assert address.id == 9
    path, payload = client.post.call_args[0]
    assert path == "/addresses"
    assert payload == {
        "addressLine1": "12 Admiralty Way",
        "city": "Lagos",
        "state": "Lagos",
        "postalCode": "106104",
        "country": "Nigeria",
        "isDefault": False,
    }


def test_create_address_accepts_bare_dto_reply() -> None:
    """The server's CreatedAtAction reply carries the DTO without an envelope."""
    client = MagicMock(spec=KasuwaApiClient)
    client.post.return_value = _make_address_node(4)
    form = AddressForm(address_line1="1 Marina", city="Lagos", state="Lagos")

    address = asyncio.run(AddressRepository(client).create_address(form))

    assert address.id == 4


def test_address_one_line() -> None:
    address = Address(
        id=1,
        address_line1="12 Admiralty Way",
        address_line2="Lekki Phase 1",
        city="Lagos",
        state="Lagos",
        postal_code="106104",
        country="Nigeria",
    )

    assert address.one_line() == (
        "12 Admiralty Way, Lekki Phase 1, Lagos, Lagos 106104, Nigeria"
    )


def test_address_form_allows_foreign_states() -> None:
    """The Nigerian state list only applies to Nigerian addresses."""
    form = AddressForm(
        address_line1="1 High Street", city="Accra", state="Greater Accra", country="Ghana"
    )

    assert form.state == "Greater Accra"


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def _draft() -> OrderDraft:
    return OrderDraft(
        shipping_address_id=1,
        billing_address_id=2,
        payment_method=PaymentMethod.USSD,
        notes="Call on arrival",
    )


def test_create_order_posts_draft_and_maps_reply() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.post.return_value = {
        "id": 17,
        "orderNumber": "ORD-20250916-0003",
        "status": "Pending",
        "paymentStatus": "Pending",
        "totalAmount": 23650.0,
    }

    placed = asyncio.run(OrderRepository(client).create_order(_draft()))

    assert placed == PlacedOrder(
        order_id=17,
        order_number="ORD-20250916-0003",
        status="Pending",
        payment_status="Pending",
        total_amount=Decimal("23650"),
    )
    client.post.assert_awaited_once_with(
        "/orders",
        {
            "shippingAddressId": 1,
            "billingAddressId": 2,
            "paymentMethod": "ussd",
            "notes": "Call on arrival",
        },
    )


def test_create_order_falls_back_to_client_order_number() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.post.return_value = {"id": 17, "orderNumber": None}

    placed = asyncio.run(OrderRepository(client).create_order(_draft()))

    assert placed.order_number.startswith("KAS-")


def test_create_order_propagates_rejection() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.post.side_effect = ApiError("Payment declined", 402)

    with pytest.raises(ApiError, match="Payment declined"):
        asyncio.run(OrderRepository(client).create_order(_draft()))


def test_create_order_reply_without_id_is_an_api_error() -> None:
    client = MagicMock(spec=KasuwaApiClient)
    client.post.return_value = {"orderNumber": "ORD-1"}

    with pytest.raises(ApiError, match="Unexpected response from /orders"):
        asyncio.run(OrderRepository(client).create_order(_draft()))
