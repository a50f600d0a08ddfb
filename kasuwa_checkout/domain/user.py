from pydantic import BaseModel


class User(BaseModel):
    """The signed-in shopper as known to the identity provider."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
