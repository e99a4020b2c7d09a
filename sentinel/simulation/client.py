"""Async client for the ledger RPC node's REST endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from sentinel.core.config import Settings, get_settings
from sentinel.core.errors import ShapeError, TransportError

logger = logging.getLogger(__name__)


class NodeClient:
    """Thin wrapper over a shared ``httpx.AsyncClient``.

    One instance is meant to be shared by every concurrent request; httpx
    pools connections internally, so no extra locking is needed. Every method
    takes the node's base URL so a single client serves all networks.

    Usage::

        async with NodeClient() as client:
            account = await client.get_account(rpc_url, "0x1")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()

        headers: dict[str, str] = {"Accept": "application/json"}
        if self.settings.node_api_key:
            headers["X-Api-Key"] = self.settings.node_api_key

        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(self.settings.node_timeout_seconds),
            transport=transport,
        )

    # ── Context manager ──────────────────────────────────────────────

    async def __aenter__(self) -> NodeClient:
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ── HTTP primitives ──────────────────────────────────────────────

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and decode the JSON body.

        Raises:
            TransportError: node unreachable, non-2xx status, or a URL httpx rejects
            ShapeError: 2xx response whose body is not JSON
        """
        try:
            resp = await self._client.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(f"RPC error: {exc}") from exc

        if not resp.is_success:
            text = resp.text or "Unknown error"
            logger.warning("%s %s → %d: %s", method, url, resp.status_code, text[:200])
            raise TransportError(
                f"Simulation failed: {text}",
                response_text=text,
                node_status=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise ShapeError(f"Node returned a non-JSON body from {url}") from exc

    # ── Endpoints ────────────────────────────────────────────────────

    async def get_account(self, rpc_url: str, address: str) -> dict[str, Any]:
        """GET /accounts/{address}."""
        return await self._request("GET", f"{rpc_url}/accounts/{address}")

    async def get_module(self, rpc_url: str, address: str, module_name: str) -> dict[str, Any]:
        """GET /accounts/{address}/module/{module_name} (includes the ABI)."""
        return await self._request("GET", f"{rpc_url}/accounts/{address}/module/{module_name}")

    async def view(self, rpc_url: str, body: dict[str, Any]) -> Any:
        """POST /view, a read-only call without signature."""
        return await self._request("POST", f"{rpc_url}/view", json=body)

    async def simulate(
        self,
        rpc_url: str,
        body: dict[str, Any],
        params: dict[str, str] | None = None,
    ) -> Any:
        """POST /transactions/simulate; returns the raw, unchecked JSON array."""
        return await self._request(
            "POST",
            f"{rpc_url}/transactions/simulate",
            json=body,
            params=params or {},
        )
