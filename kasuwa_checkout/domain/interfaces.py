from typing import Protocol

from .address import Address, AddressForm
from .cart import Cart
from .order import OrderDraft, PlacedOrder
from .user import User


class IAuthContext(Protocol):
    @property
    def current_user(self) -> User | None: ...

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def access_token(self) -> str | None: ...


class ICartClient(Protocol):
    async def get_cart(self) -> Cart: ...

    async def clear_cart(self) -> None: ...


class IAddressClient(Protocol):
    async def get_addresses(self) -> list[Address]: ...

    async def create_address(self, form: AddressForm) -> Address: ...


class IOrderClient(Protocol):
    async def create_order(self, draft: OrderDraft) -> PlacedOrder:
        """Create the order and return its identifiers."""
        ...
