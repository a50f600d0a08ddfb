from loguru import logger

from kasuwa_checkout.domain.address import Address, AddressForm
from kasuwa_checkout.infrastructure.api_client import (
    KasuwaApiClient,
    map_response,
    unwrap_api_response,
)


class AddressRepository:
    """Lists and creates the shopper's saved addresses."""

    ADDRESSES_PATH = "/addresses"

    def __init__(self, client: KasuwaApiClient) -> None:
        self._client = client

    async def get_addresses(self) -> list[Address]:
        """Return saved addresses in the order the API lists them."""
        body = await self._client.get(self.ADDRESSES_PATH)
        return map_response(
            self.ADDRESSES_PATH,
            lambda nodes: [self._map(node) for node in nodes],
            unwrap_api_response(body),
        )

    async def create_address(self, form: AddressForm) -> Address:
        payload = form.model_dump(mode="json", by_alias=True, exclude_none=True)
        body = await self._client.post(self.ADDRESSES_PATH, payload)
        address = map_response(
            self.ADDRESSES_PATH, self._map, unwrap_api_response(body)
        )
        logger.info(f"Created address {address.id}: {address.one_line()}")
        return address

    @staticmethod
    def _map(node: dict) -> Address:
        """Map a raw ``AddressDto`` to an ``Address`` domain object."""
        return Address(
            id=node["id"],
            address_line1=node["addressLine1"],
            address_line2=node.get("addressLine2") or None,
            city=node["city"],
            state=node["state"],
            postal_code=node.get("postalCode") or None,
            country=node["country"],
            is_default=node.get("isDefault", False),
        )
