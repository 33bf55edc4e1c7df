"""Async HTTP client for the voyage API.

Used by the form and list screen models.  Every non-2xx response,
transport failure, or unparsable body is raised as ``ApiError`` so
callers have one exception to handle.
"""

import logging
from typing import Any

import httpx

from voyage_planner.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A voyage API call failed.

    ``status_code`` is None for transport errors; ``payload`` holds the
    decoded error body when the server sent JSON.
    """

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)

    def field_errors(self) -> dict[str, str]:
        """Field-keyed messages from a 400 validation response, else {}."""
        try:
            errors = self.payload["error"]["details"]["errors"]
        except (KeyError, TypeError):
            return {}
        return dict(errors) if isinstance(errors, dict) else {}


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class VoyageApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` for the /api routes.

    Args:
        base_url: API origin (default: settings.api_base_url)
        transport: Optional httpx transport (ASGI app, mock, …)
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            transport=transport,
        )

    async def __aenter__(self) -> "VoyageApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, failure: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(f"{failure}: {exc}") from exc

        if not response.is_success:
            raise ApiError(
                f"{failure}: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                payload=_error_payload(response),
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, failure: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                f"{failure}: invalid response body ({exc})",
                status_code=response.status_code,
            ) from exc

    async def fetch_data(self, path: str) -> Any:
        """GET /api/{path} and return the decoded JSON."""
        failure = f"Failed to fetch {path}"
        response = await self._request("GET", f"/api/{path}", failure)
        return self._json(response, failure)

    async def create_voyage(self, payload: dict) -> dict:
        """POST /api/voyage/create; returns the created voyage JSON."""
        failure = "Failed to create voyage"
        response = await self._request(
            "POST", "/api/voyage/create", failure, json=payload
        )
        return self._json(response, failure)

    async def delete_voyage(self, voyage_id: str) -> None:
        """DELETE /api/voyage/delete?id=…"""
        await self._request(
            "DELETE",
            "/api/voyage/delete",
            "Failed to delete the voyage",
            params={"id": voyage_id},
        )
