"""Xen Orchestra client — JSON-RPC over HTTP for remotes, imports and VM start."""

from __future__ import annotations

import itertools
from typing import Any

import httpx
from loguru import logger

from vmrestore.models.remote import Destination, RemoteInfo
from vmrestore.xo.base import BackupPlatform, ImportParams


class XoApiError(Exception):
    """A Xen Orchestra call failed, either in transport or on the server side."""

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.code = code


class XoClient(BackupPlatform):
    """Talks to the Xen Orchestra JSON-RPC API."""

    def __init__(
        self,
        url: str,
        token: str = "",
        timeout: float = 30,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = url.rstrip("/") + "/api/"
        self._ids = itertools.count(1)
        cookies = {"authenticationToken": token} if token else None
        self._client = httpx.AsyncClient(
            cookies=cookies,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> XoClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Make one JSON-RPC call and return its result."""
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or {},
        }
        logger.debug(f"XO call {method}")
        try:
            resp = await self._client.post(self._endpoint, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise XoApiError(method, f"{method}: {e}") from e
        except ValueError as e:
            raise XoApiError(method, f"{method}: invalid JSON response") from e

        error = data.get("error")
        if error:
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            raise XoApiError(method, message, code)
        return data.get("result")

    @staticmethod
    def _machine_id(method: str, result: Any) -> str:
        if result is None or result == "":
            raise XoApiError(method, f"{method}: no VM id in response")
        return str(result)

    # ── BackupPlatform ──

    async def list_remote_entries(self, remote_id: str) -> list[str]:
        result = await self.call("remote.list", {"id": remote_id})
        return [str(entry) for entry in result or []]

    async def list_remotes(self) -> list[RemoteInfo]:
        result = await self.call("remote.getAll")
        return [RemoteInfo.from_api(item) for item in result or []]

    async def import_simple(self, params: ImportParams) -> str:
        result = await self.call(
            "vm.importBackup",
            {"remote": params.remote, "file": params.file, "sr": params.destination},
        )
        return self._machine_id("vm.importBackup", result)

    async def import_delta(self, params: ImportParams) -> str:
        result = await self.call(
            "vm.importDeltaBackup",
            {"remote": params.remote, "filePath": params.file, "sr": params.destination},
        )
        return self._machine_id("vm.importDeltaBackup", result)

    async def boot_machine(self, machine_id: str) -> None:
        await self.call("vm.start", {"id": machine_id})

    async def list_destinations(self) -> list[Destination]:
        result = await self.call("xo.getAllObjects", {"filter": {"type": "SR"}})
        # The API answers with an id → object mapping
        objects = result.values() if isinstance(result, dict) else result or []
        return [Destination.from_api(obj) for obj in objects]
