"""EVM JSON-RPC client with fallback support."""
import asyncio
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig

logger = logging.getLogger(__name__)


class RpcError(RuntimeError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, error: Any) -> None:
        self.error = error
        message = error.get("message") if isinstance(error, dict) else None
        super().__init__(message or f"RPC Error: {error}")


class EvmRpcClient:
    """Ethereum JSON-RPC client with automatic endpoint fallback for reads."""

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.poll_interval = config.receipt_poll_interval
        self.receipt_timeout = config.receipt_timeout
        self.current_rpc_index = 0
        self._request_id = 0

    @property
    def current_endpoint(self) -> str | None:
        return self.endpoints[self.current_rpc_index] if self.endpoints else None

    async def _post(self, rpc_url: str, payload: dict[str, Any]) -> Any:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(
                rpc_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                result = await response.json()
                if "error" in result:
                    raise RpcError(result["error"])
                return result.get("result")

    async def rpc_call(self, method: str, params: list[Any], fallback: bool = True) -> Any:
        """Make an RPC call, trying the remaining endpoints when ``fallback`` is set.

        Without fallback only the current endpoint is used and its error is
        raised unchanged, so a submitted transaction is never sent twice.
        """
        if not self.endpoints:
            raise RuntimeError("No RPC endpoints configured")

        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}

        if not fallback:
            return await self._post(self.endpoints[self.current_rpc_index], payload)

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                result = await self._post(rpc_url, payload)
            except RpcError:
                # The node executed the request; another endpoint would agree
                raise
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

            if rpc_index != self.current_rpc_index:
                logger.info("Switched to RPC endpoint: %s", rpc_url)
                self.current_rpc_index = rpc_index
            return result

        raise RuntimeError(f"All RPC endpoints failed. Last error: {last_error}")

    # ------------------------------------------------------------------
    # ChainClient
    # ------------------------------------------------------------------

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        """``eth_call`` returning the raw hex result."""
        return await self.rpc_call("eth_call", [{"to": to, "data": data}, block]) or "0x"

    async def get_chain_id(self) -> int:
        return int(await self.rpc_call("eth_chainId", []), 16)

    async def send_transaction(self, tx: dict[str, Any]) -> str:
        """Submit through ``eth_sendTransaction``; the node signs for ``tx['from']``."""
        return await self.rpc_call("eth_sendTransaction", [tx], fallback=False)

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        return await self.rpc_call("eth_getTransactionReceipt", [tx_hash])

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        """Poll for a receipt until it appears or ``receipt_timeout`` elapses."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.receipt_timeout
        while True:
            receipt = await self.get_transaction_receipt(tx_hash)
            if receipt:
                return receipt
            if loop.time() >= deadline:
                raise TimeoutError(f"No receipt for {tx_hash} after {self.receipt_timeout}s")
            logger.debug("Waiting for receipt of %s", tx_hash)
            await asyncio.sleep(self.poll_interval)
