"""
Remote Store - REST client for the remote vocabulary table

=== ENDPOINTS (Supabase / PostgREST style) ===
- create: POST  {url}/rest/v1/vocabulary
- update: PATCH {url}/rest/v1/vocabulary?id=eq.{backend_id}
- fetch:  GET   {url}/rest/v1/vocabulary?select=*&updated_at=gt.{iso}

=== HEADERS ===
- Authorization: Bearer {key}
- apikey: {key}
- Prefer: return=representation (writes only, so the row comes back)

Every failure of a single call (network, timeout, non-2xx status, body
without a row) is raised as RemoteStoreError.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

import httpx

from wordflow.core.errors import ConfigurationError, RemoteStoreError
from wordflow.utils.timeutil import ensure_utc

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    """Abstract remote collaborator used by the SyncEngine"""

    def configure(self, url: str, key: str) -> None:
        ...

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def update(self, backend_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def fetch_updated_since(self, since: Optional[datetime]) -> List[Dict[str, Any]]:
        ...


class SupabaseRemoteStore:
    """RemoteStore over the Supabase REST API using httpx"""

    TABLE_PATH = "/rest/v1/vocabulary"

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        # Injected in tests (httpx.MockTransport)
        self.transport = transport
        self.base_url: Optional[str] = None
        self.api_key: Optional[str] = None

    def configure(self, url: str, key: str) -> None:
        self.base_url = url.rstrip("/")
        self.api_key = key

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    # ============================================================
    # OPERATIONS
    # ============================================================

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self._request("POST", json=payload, write=True)
        return self._first_row(rows)

    async def update(self, backend_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self._request(
            "PATCH",
            params={"id": f"eq.{backend_id}"},
            json=payload,
            write=True
        )
        return self._first_row(rows)

    async def fetch_updated_since(self, since: Optional[datetime]) -> List[Dict[str, Any]]:
        """All rows, or only rows with updated_at strictly after since"""
        params = {"select": "*"}
        if since is not None:
            params["updated_at"] = f"gt.{ensure_utc(since).isoformat()}"

        rows = await self._request("GET", params=params)
        if not isinstance(rows, list):
            raise RemoteStoreError("Unexpected response body: expected a list of rows")
        return rows

    # ============================================================
    # HELPERS
    # ============================================================

    def _headers(self, write: bool) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
            "Content-Type": "application/json",
        }
        if write:
            headers["Prefer"] = "return=representation"
        return headers

    async def _request(
        self,
        method: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        write: bool = False
    ) -> Any:
        if not self.is_configured:
            raise ConfigurationError()

        url = f"{self.base_url}{self.TABLE_PATH}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._headers(write)
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RemoteStoreError(
                    f"Remote store error: {e.response.status_code} - {e.response.text}",
                    status_code=e.response.status_code
                ) from e
            except httpx.HTTPError as e:
                raise RemoteStoreError(f"Network error calling remote store: {e}") from e

        if not response.content:
            return []
        try:
            return response.json()
        except ValueError as e:
            raise RemoteStoreError("Remote store returned invalid JSON") from e

    @staticmethod
    def _first_row(rows: Any) -> Dict[str, Any]:
        if isinstance(rows, dict):
            rows = [rows]
        if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict):
            raise RemoteStoreError("Remote store returned an empty representation")
        row = rows[0]
        if row.get("id") is None:
            raise RemoteStoreError("Remote row has no id")
        return row
