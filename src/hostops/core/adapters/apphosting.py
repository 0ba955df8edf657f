from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from hostops.core.backends import (
    Backend,
    BackendLookup,
    LookupFailure,
    NotFound,
    OperationHandle,
    OperationStatus,
    ResourceKey,
)
from hostops.core.errors import ControlPlaneError
from hostops.core.poller import API_VERSION, DEFAULT_API_ORIGIN

logger = logging.getLogger(__name__)


class AppHostingAdapter:
    """Async adapter around the App Hosting backends and operations REST APIs."""

    _ORIGIN_ENV = "HOSTOPS_API_ORIGIN"
    _TOKEN_ENV = "HOSTOPS_ACCESS_TOKEN"
    _DEFAULT_TIMEOUT_SECONDS = 30.0

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        origin: str | None = None,
        api_version: str = API_VERSION,
        access_token: str | None = None,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Create an adapter; origin and token fall back to the environment."""
        self.client = http_client
        self.origin = (
            origin or os.getenv(self._ORIGIN_ENV) or DEFAULT_API_ORIGIN
        ).rstrip("/")
        self.api_version = api_version
        self._access_token = access_token or os.getenv(self._TOKEN_ENV) or None
        self._timeout = float(timeout_seconds)

    def _url(self, path: str) -> str:
        return f"{self.origin}/{self.api_version}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        if not self._access_token:
            return {}
        return {"Authorization": f"Bearer {self._access_token}"}

    def _raise_for_status(self, resp: httpx.Response) -> None:
        """Raise ControlPlaneError for non-2xx responses, using the API error message."""
        if resp.status_code < 400:
            return

        message = resp.text[:200] if resp.text else f"HTTP {resp.status_code}"
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                message = str(error["message"])

        raise ControlPlaneError(resp.status_code, message)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            resp = await self.client.request(
                method,
                self._url(path),
                headers=self._headers(),
                json=json,
                params=params,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise ControlPlaneError(0, f"{method} {path} failed: {exc}") from exc
        logger.debug("%s %s -> %d", method, path, resp.status_code)
        self._raise_for_status(resp)
        if not resp.content:
            return {}
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ControlPlaneError(
                resp.status_code, f"{method} {path} returned a non-JSON body"
            ) from exc
        if not isinstance(payload, dict):
            raise ControlPlaneError(
                resp.status_code, f"{method} {path} returned a non-object JSON body"
            )
        return payload

    async def get_backend(
        self, project_id: str, location: str, backend_id: str
    ) -> BackendLookup:
        """Return the backend, NotFound on 404, or LookupFailure for anything else."""
        key = ResourceKey(project_id, location, backend_id)
        try:
            payload = await self._request("GET", str(key))
        except ControlPlaneError as exc:
            if exc.status_code == 404:
                return NotFound(key)
            return LookupFailure(key, exc)
        return Backend.from_api(payload)

    async def create_backend(
        self, project_id: str, location: str, body: Backend, backend_id: str
    ) -> OperationHandle:
        """Start creating a backend and return the long-running operation handle."""
        key = ResourceKey(project_id, location, backend_id)
        op = await self._request(
            "POST",
            f"{key.parent}/backends",
            json=body.to_request_body(),
            params={"backendId": backend_id},
        )
        if not op.get("name"):
            raise ControlPlaneError(0, "create response did not include an operation name")
        return OperationHandle(
            name=str(op["name"]),
            poller_name=f"create-{project_id}-{location}-{backend_id}",
        )

    async def get_operation(self, name: str) -> OperationStatus:
        """Return the current status of a long-running operation."""
        return OperationStatus.from_api(await self._request("GET", name))
