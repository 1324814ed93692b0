"""HTTP gateway from the client core to the Right Guard API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from rightguard.errors import TransportError
from rightguard.models import ApiResponse
from rightguard.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)


class ApiGateway:
    """Send requests to the API and hand back parsed response envelopes.

    No retries, no backoff. A network failure or a non-JSON body raises
    :class:`TransportError`; any JSON envelope, successful or not, is returned
    with the HTTP status attached.
    """

    def __init__(
        self,
        *,
        client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None,
        prefix: Optional[str] = None,
    ) -> None:
        resolved = settings or get_settings()
        self._prefix = (resolved.api.prefix if prefix is None else prefix).rstrip("/")
        self._client = client or httpx.Client(base_url=resolved.api_base_url, timeout=resolved.api.timeout_seconds)
        self._owns_client = client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ApiGateway":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> ApiResponse[Any]:
        url = f"{self._prefix}{endpoint}"
        query = {key: value for key, value in (params or {}).items() if value is not None} or None
        try:
            response = self._client.request(method, url, json=json, params=query, data=data, files=files)
        except httpx.HTTPError as exc:
            LOGGER.error("API Error (%s): %s", endpoint, exc)
            raise TransportError(f"Request to {endpoint} failed: {exc}") from exc

        try:
            body: Dict[str, Any] = response.json()
        except ValueError as exc:
            LOGGER.error("API Error (%s): non-JSON response with status %s", endpoint, response.status_code)
            raise TransportError(
                f"Unreadable response from {endpoint}", status_code=response.status_code or None
            ) from exc

        if not isinstance(body, dict) or "success" not in body:
            raise TransportError(f"Unexpected response shape from {endpoint}", status_code=response.status_code)

        envelope = ApiResponse[Any].model_validate(body)
        envelope.status_code = response.status_code
        if not envelope.success:
            LOGGER.warning("API Error (%s): %s", endpoint, envelope.error)
        return envelope

    def call(self, endpoint: str, method: str = "GET", **kwargs: Any) -> ApiResponse[Any]:
        """Like :meth:`request` but turns transport failures into a failure envelope."""

        try:
            return self.request(endpoint, method, **kwargs)
        except TransportError as exc:
            return ApiResponse[Any](success=False, error=exc.message, status_code=exc.status_code)


__all__ = ["ApiGateway"]
