# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""Platform API client for pact.

Thin HTTP client with a pluggable transport interface.
Default transport: HTTP via httpx.
"""

from abc import ABC, abstractmethod

import httpx


class PactError(Exception):
    """Non-2xx response from the platform."""

    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class Transport(ABC):
    """Override this to talk to the platform some other way."""

    @abstractmethod
    async def post(self, path: str, data: dict) -> dict:
        ...

    @abstractmethod
    async def get(self, path: str, params: dict | None = None) -> dict:
        ...


class HTTPTransport(Transport):
    """Default. Talks to a pact server over HTTP."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _check(self, resp: httpx.Response) -> dict:
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", "")
            except ValueError:
                detail = resp.text
            raise PactError(resp.status_code, str(detail))
        return resp.json()

    async def post(self, path: str, data: dict) -> dict:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                f"{self.base_url}{path}",
                json=data,
                timeout=self.timeout,
            )
            return self._check(resp)

    async def get(self, path: str, params: dict | None = None) -> dict:
        async with httpx.AsyncClient() as client:
            resp = await client.get(
                f"{self.base_url}{path}",
                params=params,
                timeout=self.timeout,
            )
            return self._check(resp)


class PactClient:
    """High-level client for the pact platform."""

    def __init__(self, transport: Transport | None = None, base_url: str = "http://localhost:8000"):
        self.transport = transport or HTTPTransport(base_url)

    async def defaults(self) -> dict:
        """Prefilled title and promises for a new contract."""
        return await self.transport.get("/defaults")

    async def create(self, title: str, terms: list[str]) -> str:
        """Create a contract. Returns contract_id."""
        resp = await self.transport.post("/contracts", {"title": title, "terms": terms})
        return resp["contract_id"]

    async def get(self, contract_id: str) -> dict:
        """Signing view of a contract."""
        return await self.transport.get(f"/contracts/{contract_id}")

    async def sign(self, contract_id: str, role: str, name: str, message: str | None = None) -> dict:
        """Sign as boyfriend or girlfriend. Response says whether the contract completed."""
        return await self.transport.post(f"/contracts/{contract_id}/sign", {
            "role": role,
            "name": name,
            "message": message,
        })

    async def celebration(self, contract_id: str) -> dict:
        """Celebration view of a contract."""
        return await self.transport.get(f"/contracts/{contract_id}/celebration")
