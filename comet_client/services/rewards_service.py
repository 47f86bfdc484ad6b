"""Protocol rewards: owed amounts, tracking accrual and claims."""
from __future__ import annotations

from ..client import CometClient
from ..models import OperationResult, RewardOwed
from ..operations import require_address, run_operation


class RewardsService:
    def __init__(self, client: CometClient) -> None:
        self.client = client

    async def get_reward_owed(self, account: str) -> OperationResult[RewardOwed]:
        async def op() -> RewardOwed:
            checked = require_address(account, "account")
            ledger = self.client.comet().address
            return await self.client.rewards().get_reward_owed(ledger, checked)

        return await run_operation("get_reward_owed", op)

    async def get_base_tracking_accrued(self, account: str) -> OperationResult[int]:
        async def op() -> int:
            checked = require_address(account, "account")
            return await self.client.comet().base_tracking_accrued(checked)

        return await run_operation("get_base_tracking_accrued", op)

    async def claim(
        self, account: str, to: str | None = None, should_accrue: bool = True
    ) -> OperationResult[str]:
        """Claim ``account``'s rewards, to itself or to ``to`` when given."""

        async def op() -> str:
            src = require_address(account, "account")
            ledger = self.client.comet().address
            rewards = self.client.rewards()
            if to is None:
                pending = await rewards.claim(ledger, src, should_accrue)
            else:
                pending = await rewards.claim_to(
                    ledger, src, require_address(to, "to"), should_accrue
                )
            return await pending.confirm()

        return await run_operation("claim_reward", op)
