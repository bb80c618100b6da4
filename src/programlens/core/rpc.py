"""
Solana JSON-RPC access.

SolanaRpcClient is the async client the analyzer fetches through.
check_rpc_health is a blocking connectivity probe for the CLI.
"""

import asyncio
import base64
from typing import Any, Dict, List, Optional

import aiohttp
import httpx

from ..analysis.models import ProgramSnapshot
from ..log import get_logger

logger = get_logger(__name__)


class RpcError(RuntimeError):
    """An RPC call failed: transport, timeout, HTTP status or JSON-RPC error."""

    def __init__(self, method: str, message: str):
        super().__init__(f"{method}: {message}")
        self.method = method


class AccountNotFoundError(RpcError):
    """getAccountInfo returned no account for the address."""

    def __init__(self, address: str):
        super().__init__("getAccountInfo", f"account {address} not found")
        self.address = address


def _shape_error(method: str, value: Any) -> RpcError:
    return RpcError(method, f"unexpected response shape: {type(value).__name__}")


class SolanaRpcClient:
    """
    Async Solana RPC client.

    Can be used directly, opening a short-lived HTTP session per call, or
    as an async context manager that shares one session across calls.
    """

    def __init__(self, rpc_url: str, timeout: float = 30.0, commitment: str = "confirmed"):
        """
        Initialize RPC client.

        Args:
            rpc_url: RPC endpoint URL
            timeout: Seconds allowed for each call
            commitment: Commitment level for queries
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.commitment = commitment
        self._request_id = 0
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "SolanaRpcClient":
        self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _post(self, session: aiohttp.ClientSession, method: str, payload: dict) -> dict:
        async with session.post(
            self.rpc_url,
            json=payload,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as response:
            if response.status != 200:
                raise RpcError(method, f"HTTP {response.status}")
            return await response.json(content_type=None)

    async def _call(self, method: str, params: list = None) -> Any:
        """
        Make an RPC call.

        Raises:
            RpcError: On transport failure, timeout, or a JSON-RPC error member
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        try:
            if self._session is not None:
                result = await self._post(self._session, method, payload)
            else:
                async with aiohttp.ClientSession() as session:
                    result = await self._post(session, method, payload)
        except asyncio.TimeoutError:
            logger.warning("rpc_call_failed", method=method, reason="timeout", timeout=self.timeout)
            raise RpcError(method, f"timed out after {self.timeout}s") from None
        except aiohttp.ClientError as e:
            logger.warning("rpc_call_failed", method=method, reason=str(e))
            raise RpcError(method, f"transport error: {e}") from e
        except ValueError as e:
            raise RpcError(method, f"invalid JSON response: {e}") from e

        if not isinstance(result, dict):
            raise RpcError(method, "response is not a JSON-RPC object")
        if "error" in result:
            raise RpcError(method, f"RPC error: {result['error']}")
        return result.get("result")

    async def get_health(self) -> str:
        """Check node health."""
        return await self._call("getHealth")

    async def get_program_account(self, address: str) -> ProgramSnapshot:
        """
        Fetch the program account's size and balance.

        Raises:
            AccountNotFoundError: If no account exists at the address
            RpcError: If the node returns an unexpected response shape
        """
        method = "getAccountInfo"
        result = await self._call(
            method,
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )
        if not isinstance(result, dict):
            raise _shape_error(method, result)
        value = result.get("value")
        if value is None:
            raise AccountNotFoundError(address)
        if not isinstance(value, dict):
            raise _shape_error(method, value)

        size = value.get("space")
        if size is None:
            data = value.get("data") or ["", "base64"]
            if not isinstance(data, list) or not data or not isinstance(data[0], str):
                raise _shape_error(method, data)
            try:
                size = len(base64.b64decode(data[0], validate=True))
            except ValueError as e:
                raise RpcError(method, f"undecodable account data: {e}") from e

        try:
            return ProgramSnapshot(
                address=address,
                account_data_size_bytes=int(size),
                lamport_balance=int(value.get("lamports", 0)),
            )
        except (TypeError, ValueError) as e:
            raise RpcError(method, f"unexpected response shape: {e}") from e

    async def get_recent_signatures(self, address: str, limit: int) -> List[str]:
        """Most recent transaction signatures for an address, newest first."""
        method = "getSignaturesForAddress"
        result = await self._call(
            method,
            [address, {"limit": limit, "commitment": self.commitment}],
        )
        if result is None:
            return []
        if not isinstance(result, list):
            raise _shape_error(method, result)

        signatures = []
        for entry in result:
            if not isinstance(entry, dict):
                raise _shape_error(method, entry)
            if isinstance(entry.get("signature"), str):
                signatures.append(entry["signature"])
        return signatures

    async def get_transaction_details(self, signature: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a confirmed transaction with its metadata.

        Returns:
            The raw getTransaction result, or None if the node has no record
        """
        return await self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": self.commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Lamports needed to keep an account of the given size rent exempt."""
        method = "getMinimumBalanceForRentExemption"
        result = await self._call(method, [size])
        if isinstance(result, bool) or not isinstance(result, int):
            raise _shape_error(method, result)
        return result


def check_rpc_health(rpc_url: str, timeout: float = 10.0) -> Dict[str, Any]:
    """
    Probe an RPC endpoint with getHealth and getVersion.

    Returns:
        Dict with "healthy" (bool), "version" (str or None) and "error"

    Raises:
        RpcError: If the endpoint cannot be reached
    """
    status: Dict[str, Any] = {"healthy": False, "version": None, "error": None}
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.post(
                rpc_url,
                json={"jsonrpc": "2.0", "id": 1, "method": "getHealth"},
            )
            result = response.json()
            if not isinstance(result, dict):
                raise _shape_error("getHealth", result)
            if result.get("result") == "ok":
                status["healthy"] = True
            elif "error" in result:
                error = result["error"]
                status["error"] = error.get("message", str(error)) if isinstance(error, dict) else str(error)

            response = client.post(
                rpc_url,
                json={"jsonrpc": "2.0", "id": 2, "method": "getVersion"},
            )
            version = response.json()
            if isinstance(version, dict) and isinstance(version.get("result"), dict):
                status["version"] = version["result"].get("solana-core")
    except httpx.HTTPError as e:
        raise RpcError("getHealth", f"transport error: {e}") from e
    except ValueError as e:
        raise RpcError("getHealth", f"invalid JSON response: {e}") from e
    return status
