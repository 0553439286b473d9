"""Variable store clients.

The sync engine talks to the external variable store through the
VariableStore protocol:

    async def wait_ready(self) -> None
    async def get_data(self, message_id="latest") -> dict
    async def replace_data(self, data, message_id="latest") -> None
    async def run_script(self, script, data) -> dict | None

Structural edits (get/set/insert/delete/add) are done on snapshots with
the helpers in variables.paths, or expressed as a command script.

Two implementations are provided:

    MemoryVariableStore — in-process snapshots with a built-in script
                          interpreter. Used by tests and local runs.
    HttpVariableStore   — client for a remote variable service.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Protocol

import httpx

from .script import ScriptParseError, apply_ops, parse_script

logger = logging.getLogger(__name__)

LATEST = "latest"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class VariableStoreError(RuntimeError):
    """Raised when the variable store cannot be reached or rejects a call."""


class ScriptRejectedError(VariableStoreError):
    """Raised when the store's interpreter fails to run a command script."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class VariableStore(Protocol):
    async def wait_ready(self) -> None: ...

    async def get_data(self, message_id: str = LATEST) -> dict: ...

    async def replace_data(self, data: dict, message_id: str = LATEST) -> None: ...

    async def run_script(self, script: str, data: dict) -> dict | None: ...


def run_script_locally(script: str, data: dict) -> dict | None:
    """Interpret a command script against a copy of data.

    Returns the resulting snapshot, or None if the script is malformed or
    an operation cannot be applied. The input is never modified.
    """
    try:
        ops = parse_script(script)
        return apply_ops(copy.deepcopy(data), ops)
    except (ScriptParseError, TypeError, ValueError) as e:
        logger.warning("script rejected: %s", e)
        return None


# ---------------------------------------------------------------------------
# MemoryVariableStore
# ---------------------------------------------------------------------------

class MemoryVariableStore:
    """Snapshots keyed by message id, held in memory.

    Reads return deep copies, so callers can mutate what they get without
    touching stored state until they call replace_data().
    """

    def __init__(self, data: dict | None = None, ready: bool = True) -> None:
        self._messages: dict[str, dict] = {}
        if data is not None:
            self._messages[LATEST] = copy.deepcopy(data)
        self._ready = asyncio.Event()
        if ready:
            self._ready.set()
        self.replace_count = 0

    def mark_ready(self) -> None:
        self._ready.set()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def snapshot(self, message_id: str = LATEST) -> dict:
        """Synchronous copy of a stored snapshot (for inspection)."""
        return copy.deepcopy(self._messages.get(str(message_id), {}))

    async def wait_ready(self) -> None:
        await self._ready.wait()

    async def get_data(self, message_id: str = LATEST) -> dict:
        return self.snapshot(message_id)

    async def replace_data(self, data: dict, message_id: str = LATEST) -> None:
        self._messages[str(message_id)] = copy.deepcopy(data)
        self.replace_count += 1
        logger.debug("memory store replaced message=%s", message_id)

    async def run_script(self, script: str, data: dict) -> dict | None:
        return run_script_locally(script, data)


# ---------------------------------------------------------------------------
# HttpVariableStore
# ---------------------------------------------------------------------------

class HttpVariableStore:
    """Async HTTP client for a remote variable service.

    Endpoints:
      GET  /ready                        → {"ready": bool}; 503 while starting
      GET  /messages/{id}/variables      → snapshot object
      PUT  /messages/{id}/variables      ← snapshot object
      POST /scripts  {"script", "data"}  → {"result": snapshot | null}

    Args:
        base_url:       Service root, e.g. "http://localhost:8790".
        api_key:        Bearer token, or empty string if not required.
        timeout:        Per-request timeout in seconds.
        ready_interval: Delay between readiness checks.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        ready_interval: float = 1.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._ready_interval = ready_interval

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("variable store %s %s", method, url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(method, url, headers=self._headers(), **kwargs)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise VariableStoreError(f"Cannot connect to variable store at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise VariableStoreError(
                f"Variable store returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise VariableStoreError(f"Variable store timed out after {self._timeout}s") from e
        return resp

    async def _check_ready(self) -> bool:
        url = f"{self._base_url}/ready"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url, headers=self._headers())
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
        if resp.status_code == 503:
            return False
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise VariableStoreError(
                f"Variable store returned HTTP {e.response.status_code}"
            ) from e
        return bool(resp.json().get("ready"))

    async def wait_ready(self) -> None:
        """Block until the service reports ready. Unreachable counts as not ready yet."""
        while not await self._check_ready():
            logger.debug("variable store not ready, retrying in %.1fs", self._ready_interval)
            await asyncio.sleep(self._ready_interval)

    async def get_data(self, message_id: str = LATEST) -> dict:
        resp = await self._request("GET", f"/messages/{message_id}/variables")
        data = resp.json()
        if not isinstance(data, dict):
            raise VariableStoreError("Unexpected snapshot format from variable store")
        return data

    async def replace_data(self, data: dict, message_id: str = LATEST) -> None:
        await self._request("PUT", f"/messages/{message_id}/variables", json=data)

    async def run_script(self, script: str, data: dict) -> dict | None:
        resp = await self._request("POST", "/scripts", json={"script": script, "data": data})
        result = resp.json().get("result")
        return result if isinstance(result, dict) and result else None
