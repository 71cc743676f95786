"""HTTP client wrapper for the Boardwatch API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from boardwatch.core.errors import (
    BoardwatchError,
    ConflictError,
    InvalidInputError,
    NoActiveRequestError,
    NotFoundError,
    TransientError,
    UnauthenticatedError,
)
from boardwatch.core.settings import settings

__all__ = ["BoardingApiClient", "NearbyResult"]

logger = logging.getLogger(__name__)

HTTP_INTERNAL_SERVER_ERROR = 500


@dataclass(frozen=True)
class NearbyResult:
    """Parsed ``/vehicles/nearby`` response."""

    buses: list[dict[str, Any]] = field(default_factory=list)
    last_update: datetime | None = None


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, Mapping):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


class BoardingApiClient:
    """Bearer-authenticated access to the Boardwatch HTTP API.

    Every call maps its outcome onto the shared error taxonomy: 401/403
    raise :class:`UnauthenticatedError`, 400 :class:`InvalidInputError`,
    404 :class:`NotFoundError`, 409 :class:`ConflictError`, and 5xx, timeouts
    and network failures :class:`TransientError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds or settings.client_timeout_seconds),
            transport=transport,
        )

    def clear_token(self) -> None:
        self.token = None

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BoardingApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        params: Mapping[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if authenticated:
            if not self.token:
                raise UnauthenticatedError("No bearer token available", status_code=401)
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._client.request(
                method, path, json=json_data, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            raise TransientError(f"{method} {path} failed: {exc}") from exc

        status_code = response.status_code
        if status_code in (401, 403):
            raise UnauthenticatedError(_detail(response), status_code=status_code)
        if status_code >= HTTP_INTERNAL_SERVER_ERROR:
            raise TransientError(f"{method} {path} responded with {status_code}")
        if status_code == 400:
            raise InvalidInputError(_detail(response))
        if status_code == 404:
            raise NotFoundError(_detail(response))
        if status_code == 409:
            raise ConflictError(_detail(response))
        if status_code >= 300:
            raise BoardwatchError(f"{method} {path} responded with {status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise TransientError(f"{method} {path} returned a non-JSON body") from exc

    async def register(self, cpf: str, password: str) -> str:
        """Create an account and return its id."""
        body = await self._request(
            "POST",
            "/api/auth/register",
            json_data={"cpf": cpf, "password": password},
            authenticated=False,
        )
        return str(body["id"])

    async def login(self, cpf: str, password: str) -> str:
        """Log in, remember the bearer token and return it."""
        body = await self._request(
            "POST",
            "/api/auth/login",
            json_data={"cpf": cpf, "password": password},
            authenticated=False,
        )
        self.token = str(body["access_token"])
        return self.token

    async def create_request(self, origin: str, line_id: str) -> int:
        """Create or replace the rider's boarding request; return its id."""
        body = await self._request(
            "POST",
            "/api/requests",
            json_data={"origin": origin, "destination": line_id, "requested": True},
        )
        return int(body["id"])

    async def get_current_request(self) -> dict[str, Any]:
        return await self._request("GET", "/api/requests/current")

    async def confirm(self, line_id: str) -> dict[str, Any]:
        """Confirm boarding of ``line_id``.

        Raises:
            NoActiveRequestError: If the server holds no request for this rider.
        """
        try:
            return await self._request(
                "PUT", "/api/requests/current", json_data={"line_id": line_id}
            )
        except NotFoundError as exc:
            raise NoActiveRequestError(str(exc)) from exc

    async def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float | None = None,
        line: str | None = None,
    ) -> NearbyResult:
        params: dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "radius_km": radius_km if radius_km is not None else settings.nearby_default_radius_km,
        }
        if line:
            params["line"] = line
        body = await self._request("GET", "/api/vehicles/nearby", params=params)
        buses = body.get("buses") if isinstance(body, Mapping) else None
        if not isinstance(buses, list):
            raise TransientError("Malformed nearby response: missing 'buses'")
        last_update = body.get("lastUpdate")
        try:
            parsed = datetime.fromisoformat(last_update) if last_update else None
        except (TypeError, ValueError) as exc:
            raise TransientError(f"Malformed nearby response: lastUpdate={last_update!r}") from exc
        return NearbyResult(buses=buses, last_update=parsed)

    async def update_vehicle(
        self,
        vehicle_id: str,
        latitude: float,
        longitude: float,
        speed: float | None = None,
        line_id: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "vehicle_id": vehicle_id,
            "latitude": latitude,
            "longitude": longitude,
        }
        if speed is not None:
            payload["speed"] = speed
        if line_id is not None:
            payload["line_id"] = line_id
        body = await self._request("POST", "/api/vehicles/update", json_data=payload)
        return dict(body["bus"])

    async def line_demand(self) -> dict[str, int]:
        body = await self._request("GET", "/api/lines/demand")
        return {item["line_id"]: int(item["total_confirmations"]) for item in body["lines"]}
