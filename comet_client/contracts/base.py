"""Shared plumbing for the contract handles."""
from __future__ import annotations

import logging
from typing import Any

from eth_utils import to_checksum_address

from ..errors import MissingArgument, UpstreamFailure
from ..interfaces import ChainClient
from ..models import TransactionReceipt
from ..resolver import normalize_address
from .abi import ContractFunction

logger = logging.getLogger(__name__)


def checksum(value: str) -> str:
    return to_checksum_address(value)


class PendingTransaction:
    """A submitted transaction; ``wait()`` resolves to its receipt."""

    def __init__(self, chain: ChainClient, transaction_hash: str) -> None:
        self._chain = chain
        self.hash = transaction_hash

    async def wait(self) -> TransactionReceipt:
        receipt = await self._chain.wait_for_receipt(self.hash)
        return TransactionReceipt(
            transaction_hash=receipt.get("transactionHash", self.hash),
            block_number=_as_int(receipt.get("blockNumber")),
            status=_as_int(receipt.get("status")),
        )

    async def confirm(self) -> str:
        """Wait for the receipt and return the mined hash; a revert is an UpstreamFailure."""
        receipt = await self.wait()
        if not receipt.succeeded:
            raise UpstreamFailure(RuntimeError(f"Transaction {receipt.transaction_hash} reverted"))
        logger.info("Confirmed %s in block %s", receipt.transaction_hash, receipt.block_number)
        return receipt.transaction_hash

    def __repr__(self) -> str:
        return f"PendingTransaction({self.hash})"


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, str):
        return int(value, 16)
    return int(value)


class ContractHandle:
    """Binds a chain client to one contract address.

    The address is fixed at construction, so a handle keeps addressing the
    same contract even if the owning client switches endpoints meanwhile.
    """

    label = "contract address"

    def __init__(self, chain: ChainClient, address: str, sender: str | None = None) -> None:
        self.chain = chain
        self.address = normalize_address(address, self.label)
        self.sender = normalize_address(sender, "sender address") if sender else None

    async def _call(self, fn: ContractFunction, *args: Any) -> Any:
        data = await self.chain.call(self.address, fn.encode_call(*args))
        return fn.decode_output(data)

    async def _transact(self, fn: ContractFunction, *args: Any) -> PendingTransaction:
        if self.sender is None:
            raise MissingArgument("sender")
        tx = {"from": self.sender, "to": self.address, "data": fn.encode_call(*args)}
        tx_hash = await self.chain.send_transaction(tx)
        logger.info("Submitted %s to %s: %s", fn.name, self.address, tx_hash)
        return PendingTransaction(self.chain, tx_hash)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"
