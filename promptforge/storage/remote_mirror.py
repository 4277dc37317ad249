"""Best-effort mirror of local writes to the hosted relational backend.

Every call here may fail for network, auth or schema reasons. Failures
are logged and swallowed: callers only ever see ``False`` or ``None``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx


logger = logging.getLogger("promptforge.storage.remote")


class RemoteTable:
    """Row operations on one remote table."""

    def __init__(self, mirror: "RemoteMirror", name: str) -> None:
        self.mirror = mirror
        self.name = name

    async def insert(self, record: Dict[str, Any]) -> bool:
        return await self.mirror._send("insert", self.name, "POST", json=record) is not None

    async def update(self, record_id: str, fields: Dict[str, Any]) -> bool:
        return (
            await self.mirror._send(
                "update", self.name, "PATCH", params={"id": f"eq.{record_id}"}, json=fields
            )
            is not None
        )

    async def delete(self, record_id: str) -> bool:
        return await self.delete_match({"id": record_id})

    async def delete_match(self, filters: Dict[str, str]) -> bool:
        params = {column: f"eq.{value}" for column, value in filters.items()}
        return await self.mirror._send("delete", self.name, "DELETE", params=params) is not None

    async def list_by_owner(self, owner_id: str) -> Optional[List[Dict[str, Any]]]:
        response = await self.mirror._send(
            "list",
            self.name,
            "GET",
            params={"select": "*", "user_id": f"eq.{owner_id}", "order": "updated_at.desc"},
        )
        if response is None:
            return None
        try:
            rows = response.json()
        except ValueError as exc:
            logger.warning(
                "Remote %s list returned invalid JSON: %s", self.name, exc,
                extra={"table": self.name, "operation": "list"},
            )
            return None
        if not isinstance(rows, list):
            logger.warning(
                "Remote %s list returned %s instead of rows", self.name, type(rows).__name__,
                extra={"table": self.name, "operation": "list"},
            )
            return None
        return rows


class RemoteMirror:
    """REST client for the remote copy of the owner's data.

    Talks to a PostgREST-style API at ``<base_url>/rest/v1/<table>``. A
    mirror without a base URL is disabled and every call is a no-op.
    """

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.enabled = bool(self.base_url)
        self._client = client
        self._timeout = timeout

        if not self.enabled:
            logger.info("Remote URL not configured, mirror writes disabled")

    def table(self, name: str) -> RemoteTable:
        return RemoteTable(self, name)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Prefer": "return=minimal"}
        if self.api_key:
            headers["apikey"] = self.api_key
        token = self.access_token or self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(
        self,
        operation: str,
        table: str,
        method: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
    ) -> Optional[httpx.Response]:
        if not self.enabled:
            logger.debug("[mirror disabled] %s %s", operation, table)
            return None

        url = f"{self.base_url}/rest/v1/{table}"
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, params=params, json=json, headers=self._headers(), timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(
                        method, url, params=params, json=json, headers=self._headers()
                    )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            # Unreachable and rejected are treated the same: logged, then dropped.
            logger.warning(
                "Remote %s on %s failed, kept locally only: %s", operation, table, exc,
                extra={"table": table, "operation": operation},
            )
            return None
        return response
