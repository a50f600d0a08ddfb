from kasuwa_checkout.domain.user import User


class StaticAuthContext:
    """Auth capability backed by a fixed user and bearer token."""

    def __init__(self, user: User | None, access_token: str | None) -> None:
        self._user = user
        self._access_token = access_token

    @property
    def current_user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and bool(self._access_token)

    @property
    def access_token(self) -> str | None:
        return self._access_token

    def sign_out(self) -> None:
        self._user = None
        self._access_token = None
