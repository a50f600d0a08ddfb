from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_COUNTRY = "Nigeria"

NIGERIAN_STATES: frozenset[str] = frozenset(
    {
        "Abia", "Adamawa", "Akwa Ibom", "Anambra", "Bauchi", "Bayelsa", "Benue",
        "Borno", "Cross River", "Delta", "Ebonyi", "Edo", "Ekiti", "Enugu",
        "Gombe", "Imo", "Jigawa", "Kaduna", "Kano", "Katsina", "Kebbi", "Kogi",
        "Kwara", "Lagos", "Nasarawa", "Niger", "Ogun", "Ondo", "Osun", "Oyo",
        "Plateau", "Rivers", "Sokoto", "Taraba", "Yobe", "Zamfara",
        "Federal Capital Territory",
    }
)  # fmt: skip


class Address(BaseModel):
    """A saved shipping/billing address owned by the address API."""

    id: int
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str | None = None
    country: str
    is_default: bool = False

    def one_line(self) -> str:
        street = ", ".join(p for p in (self.address_line1, self.address_line2) if p)
        region = " ".join(p for p in (self.state, self.postal_code) if p)
        return f"{street}, {self.city}, {region}, {self.country}"


class AddressForm(BaseModel):
    """Fields of a new address entered on the shipping step.

    Serialises to the create-address payload (``addressLine1``, ``city``, ...)
    via ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    address_line1: str = Field(..., min_length=1)
    address_line2: str | None = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str | None = None
    country: str = Field(default=DEFAULT_COUNTRY, min_length=1)
    is_default: bool = False

    @model_validator(mode="after")
    def _state_belongs_to_country(self) -> "AddressForm":
        # The storefront only offers Nigerian states for Nigerian addresses
        if self.country == DEFAULT_COUNTRY and self.state not in NIGERIAN_STATES:
            raise ValueError(f"'{self.state}' is not a Nigerian state")
        return self
