"""Chain client protocol: the EVM JSON-RPC calls contract handles rely on."""
from typing import Any, Protocol


class ChainClient(Protocol):
    """Abstract interface for the reads and writes the contract handles issue."""

    async def call(self, to: str, data: str, block: str = "latest") -> str: ...

    async def send_transaction(self, tx: dict[str, Any]) -> str: ...

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None: ...

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]: ...

    async def get_chain_id(self) -> int: ...
