"""
Client for the remote hunt authority.

Wraps the REST endpoints under /hunts and classifies failures:
- RemoteUnavailable: transport errors, timeouts, 5xx, 408, 429. Transient.
- RemoteRejected: any other non-success status. Permanent.
"""

import logging
from typing import Any, Protocol

import httpx

from shinytracker.models.hunt import HuntId, HuntRecord, NewHunt

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = frozenset({408, 429})


class RemoteError(Exception):
    """Raised when a call to the remote authority does not succeed."""

    pass


class RemoteUnavailable(RemoteError):
    """The remote authority could not be reached or failed transiently."""

    pass


class RemoteRejected(RemoteError):
    """The remote authority refused the request."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class HuntsRemote(Protocol):
    """Operations the sync engine needs from the remote authority."""

    async def list_hunts(self) -> list[HuntRecord]: ...

    async def create_hunt(self, new_hunt: NewHunt) -> HuntRecord: ...

    async def update_hunt(self, hunt_id: HuntId, payload: dict[str, Any]) -> None: ...

    async def delete_hunt(self, hunt_id: HuntId) -> None: ...


class HuntsClient:
    """
    HTTP implementation of HuntsRemote.

    Args:
        base_url: API root, e.g. "http://localhost:8000/api"
        timeout: Per-request timeout in seconds
        http_client: Shared client to use instead of one per call
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    async def list_hunts(self) -> list[HuntRecord]:
        """Fetch every hunt the server knows about."""
        data = await self._request("GET", "/hunts")
        if not isinstance(data, list):
            raise RemoteRejected("Expected a list of hunts", status_code=200)
        try:
            return [HuntRecord.from_api(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteRejected(f"Malformed hunt in response: {e}", status_code=200) from e

    async def create_hunt(self, new_hunt: NewHunt) -> HuntRecord:
        """Create a hunt; the server assigns id and started_at."""
        data = await self._request("POST", "/hunts", json=new_hunt.to_api())
        try:
            return HuntRecord.from_api(data)
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteRejected(f"Malformed hunt in response: {e}", status_code=200) from e

    async def update_hunt(self, hunt_id: HuntId, payload: dict[str, Any]) -> None:
        """
        Overwrite fields of a hunt.

        The response body is deliberately ignored: only success or failure
        is reported, so a late response can never clobber newer local values.
        """
        await self._request("PUT", f"/hunts/{hunt_id}", json=payload)

    async def delete_hunt(self, hunt_id: HuntId) -> None:
        await self._request("DELETE", f"/hunts/{hunt_id}")

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            if self._http_client is not None:
                response = await self._http_client.request(method, url, json=json)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, json=json)
            response.raise_for_status()
            return response.json() if response.content else None
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = f"{method} {path} failed: HTTP {status_code}"
            if status_code >= 500 or status_code in _TRANSIENT_STATUSES:
                raise RemoteUnavailable(message) from e
            raise RemoteRejected(message, status_code=status_code) from e
        except httpx.RequestError as e:
            raise RemoteUnavailable(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise RemoteRejected(f"{method} {path} returned invalid JSON", status_code=200) from e
