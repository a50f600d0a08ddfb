from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import ValidationError

from kasuwa_checkout.domain.errors import CheckoutError
from kasuwa_checkout.domain.interfaces import IAuthContext
from kasuwa_checkout.shared.decorators import log_errors

T = TypeVar("T")


class ApiError(CheckoutError):
    """Raised when the Kasuwa API rejects a request or cannot be reached."""

    def __init__(
        self, message: str, status_code: int = 0, errors: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code  # 0 when no response was received
        self.errors = errors or []


def _flatten_errors(raw: Any) -> list[str]:
    """Normalise ``errors`` from either a list or an ASP.NET problem-details map."""
    if not raw:
        return []
    if isinstance(raw, dict):
        flat: list[str] = []
        for messages in raw.values():
            if isinstance(messages, list):
                flat.extend(str(m) for m in messages)
            else:
                flat.append(str(messages))
        return flat
    if isinstance(raw, list):
        return [str(m) for m in raw]
    return [str(raw)]


def unwrap_api_response(body: Any, *, allow_empty: bool = False) -> Any:
    """Return the ``data`` member of a ``{success, message, data, errors}`` envelope.

    Bodies without a ``success`` key are returned unchanged, since some
    endpoints (e.g. ``POST /orders``) reply with the bare DTO.

    Raises:
        ApiError: if ``success`` is false, or if there is no data and
            ``allow_empty`` is not set.
    """
    if isinstance(body, dict) and "success" in body:
        if not body["success"]:
            raise ApiError(
                body.get("message") or "API request failed",
                400,
                _flatten_errors(body.get("errors")),
            )
        body = body.get("data")

    if body is None and not allow_empty:
        raise ApiError("No data in API response", 400)
    return body


def map_response(path: str, mapper: Callable[[Any], T], data: Any) -> T:
    """Apply ``mapper`` to an unwrapped reply from ``path``.

    A reply whose shape the domain models cannot accept becomes an
    ``ApiError`` rather than a ``KeyError`` or ``ValidationError``.
    """
    try:
        return mapper(data)
    except (KeyError, TypeError, AttributeError, ArithmeticError, ValidationError) as exc:
        logger.warning(f"Unmappable reply from {path}: {data!r}")
        raise ApiError(f"Unexpected response from {path}: {exc}") from exc


class KasuwaApiClient:
    """Thin async httpx wrapper for the Kasuwa REST API."""

    def __init__(
        self, client: httpx.AsyncClient, base_url: str, auth: IAuthContext
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._auth = auth

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        # Read per request so a refreshed token is picked up
        if token := self._auth.access_token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, payload: dict | None = None) -> Any:
        return await self.request("POST", path, payload=payload)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    @log_errors
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        payload: dict | None = None,
    ) -> Any:
        """Send a request and return the parsed JSON body (``None`` if empty).

        Raises:
            ApiError: on non-2xx responses, non-JSON success bodies, and
                transport failures (connection errors, timeouts).
        """
        url = self._base_url + path
        query = {k: v for k, v in (params or {}).items() if v is not None}

        logger.debug(f"{method} {url}")
        try:
            response = await self._client.request(
                method, url, headers=self._headers(), params=query, json=payload
            )
        except httpx.TransportError as exc:
            raise ApiError(f"Could not reach the Kasuwa API: {exc}") from exc

        return self._handle_response(response)

    @staticmethod
    def _handle_response(response: httpx.Response) -> Any:
        is_json = "application/json" in response.headers.get("content-type", "")

        if not response.is_success:
            message = f"HTTP {response.status_code}: {response.reason_phrase}"
            errors: list[str] = []
            if is_json:
                try:
                    body = response.json()
                except ValueError:
                    body = None
                if isinstance(body, dict):
                    message = body.get("message") or body.get("title") or message
                    errors = _flatten_errors(body.get("errors"))
                elif isinstance(body, str) and body:
                    message = body
            elif response.text:
                message = response.text
            raise ApiError(message, response.status_code, errors)

        if not response.content:
            return None
        if not is_json:
            raise ApiError("Expected JSON response", response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON response", response.status_code) from exc
