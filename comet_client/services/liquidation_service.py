"""Liquidation reads and writes: absorb, buy collateral, reserves."""
from __future__ import annotations

from ..client import CometClient
from ..contracts import PendingTransaction
from ..errors import MissingArgument
from ..models import LiquidatorPoints, OperationResult
from ..operations import (
    require_address,
    require_non_negative_index,
    require_positive_amount,
    run_operation,
)


class LiquidationService:
    def __init__(self, client: CometClient) -> None:
        self.client = client

    async def is_liquidatable(self, account: str) -> OperationResult[bool]:
        """The ledger's own answer; no client-side health math involved."""

        async def op() -> bool:
            checked = require_address(account, "account")
            return await self.client.comet().is_liquidatable(checked)

        return await run_operation("is_liquidatable", op)

    async def get_ask_price(self, asset: str, base_amount: int) -> OperationResult[int]:
        """Collateral units ``base_amount`` of base asset buys from the protocol."""

        async def op() -> int:
            checked = require_address(asset, "asset")
            amount = require_positive_amount(base_amount, "base_amount")
            return await self.client.comet().quote_collateral(checked, amount)

        return await run_operation("get_ask_price", op)

    async def get_reserves(self) -> OperationResult[int]:
        return await run_operation("get_reserves", lambda: self.client.comet().get_reserves())

    async def get_target_reserves(self) -> OperationResult[int]:
        return await run_operation(
            "get_target_reserves", lambda: self.client.comet().target_reserves()
        )

    async def get_collateral_reserves(self, asset: str) -> OperationResult[int]:
        async def op() -> int:
            checked = require_address(asset, "asset")
            return await self.client.comet().get_collateral_reserves(checked)

        return await run_operation("get_collateral_reserves", op)

    async def get_liquidator_points(self, account: str) -> OperationResult[LiquidatorPoints]:
        async def op() -> LiquidatorPoints:
            checked = require_address(account, "account")
            return await self.client.comet().liquidator_points(checked)

        return await run_operation("get_liquidator_points", op)

    async def absorb(self, absorber: str, accounts: list[str]) -> OperationResult[str]:
        async def op() -> str:
            checked = require_address(absorber, "absorber")
            if not accounts:
                raise MissingArgument("accounts")
            targets = [require_address(a, "accounts") for a in accounts]
            pending: PendingTransaction = await self.client.comet().absorb(checked, targets)
            return await pending.confirm()

        return await run_operation("absorb", op)

    async def buy_collateral(
        self, asset: str, min_amount: int, base_amount: int, recipient: str
    ) -> OperationResult[str]:
        async def op() -> str:
            checked_asset = require_address(asset, "asset")
            checked_recipient = require_address(recipient, "recipient")
            amount = require_positive_amount(base_amount, "base_amount")
            checked_min = require_non_negative_index(min_amount, "min_amount")
            pending = await self.client.comet().buy_collateral(
                checked_asset, checked_min, amount, checked_recipient
            )
            return await pending.confirm()

        return await run_operation("buy_collateral", op)
