"""Handle for the rewards contract shared by a chain's markets."""
from __future__ import annotations

from ..models import RewardOwed
from .abi import ContractFunction as Fn
from .base import ContractHandle, PendingTransaction, checksum

GET_REWARD_OWED = Fn("getRewardOwed", ("address", "address"), ("(address,uint256)",))
CLAIM = Fn("claim", ("address", "address", "bool"))
CLAIM_TO = Fn("claimTo", ("address", "address", "address", "bool"))


class RewardsContract(ContractHandle):
    label = "rewards address"

    async def get_reward_owed(self, comet: str, account: str) -> RewardOwed:
        token, owed = await self._call(GET_REWARD_OWED, checksum(comet), checksum(account))
        return RewardOwed(token=checksum(token), owed=owed)

    async def claim(self, comet: str, src: str, should_accrue: bool = True) -> PendingTransaction:
        return await self._transact(CLAIM, checksum(comet), checksum(src), should_accrue)

    async def claim_to(
        self, comet: str, src: str, to: str, should_accrue: bool = True
    ) -> PendingTransaction:
        return await self._transact(
            CLAIM_TO, checksum(comet), checksum(src), checksum(to), should_accrue
        )
