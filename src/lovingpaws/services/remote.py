"""Remote datastore client used to replicate the sync queue."""

from typing import Any, Protocol

import httpx
import structlog

from lovingpaws.core.config import settings

logger = structlog.get_logger()


class RemoteSyncError(Exception):
    """The remote store rejected or failed a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteStore(Protocol):
    """Insert/update/delete-by-id access to the cloud copy of each table."""

    async def insert(self, table: str, record_id: str, data: dict[str, Any]) -> None: ...

    async def update(self, table: str, record_id: str, data: dict[str, Any]) -> None: ...

    async def delete(self, table: str, record_id: str) -> None: ...

    async def fetch_all(self, table: str) -> list[dict[str, Any]]: ...

    async def is_online(self) -> bool: ...


class HttpRemoteStore:
    """Remote store over a plain REST API.

    ``POST /{table}``, ``PATCH /{table}/{id}``, ``DELETE /{table}/{id}`` and
    ``GET /{table}``, authenticated with a bearer API key.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize with remote URL and credentials (defaults to settings)."""
        self.base_url = (base_url or settings.remote_sync_url or "").rstrip("/")
        self.api_key = api_key or settings.remote_sync_api_key
        self.timeout = timeout if timeout is not None else settings.remote_sync_timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with authentication."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        if not self.configured:
            raise RemoteSyncError("Remote sync URL not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                resp = await client.request(
                    method,
                    f"{self.base_url}/{path}",
                    headers=self._get_headers(),
                    json=json,
                )
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RemoteSyncError(
                    f"{method} {path} failed with {e.response.status_code}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise RemoteSyncError(f"{method} {path} failed: {e}") from e
        return resp

    async def insert(self, table: str, record_id: str, data: dict[str, Any]) -> None:
        await self._request("POST", table, json={**data, "id": record_id})

    async def update(self, table: str, record_id: str, data: dict[str, Any]) -> None:
        await self._request("PATCH", f"{table}/{record_id}", json=data)

    async def delete(self, table: str, record_id: str) -> None:
        try:
            await self._request("DELETE", f"{table}/{record_id}")
        except RemoteSyncError as e:
            # Already gone remotely
            if e.status_code != 404:
                raise
            logger.debug("Remote record already deleted", table=table, record_id=record_id)

    async def fetch_all(self, table: str) -> list[dict[str, Any]]:
        resp = await self._request("GET", table)
        records: list[dict[str, Any]] = resp.json()
        return records

    async def is_online(self) -> bool:
        """Check if the remote store answers."""
        if not self.configured:
            return False
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                resp = await client.get(f"{self.base_url}/users", headers=self._get_headers())
                return resp.status_code < 500
        except httpx.HTTPError as e:
            logger.warning("Remote store unreachable", error=str(e))
            return False
