"""Account reads, position assessment and account-level writes."""
from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from ..client import CometClient
from ..config import HealthThresholds
from ..contracts import CometContract, PendingTransaction
from ..errors import UpstreamFailure
from ..health import evaluate_health
from ..models import AssetInfo, Denomination, HealthAssessment, OperationResult, UserBasic
from ..numeric import PRICE_SCALE, scale_for_decimals, to_decimal
from ..operations import (
    require_address,
    require_bytes32,
    require_non_negative_index,
    require_positive_amount,
    require_uint8,
    run_operation,
)

logger = logging.getLogger(__name__)


class AccountService:
    """Per-account operations against the client's current market."""

    def __init__(self, client: CometClient, thresholds: HealthThresholds | None = None) -> None:
        self.client = client
        self.thresholds = thresholds or HealthThresholds()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_balance(self, account: str) -> OperationResult[int]:
        """Base asset supplied by ``account`` (present value, base decimals)."""

        async def op() -> int:
            checked = require_address(account, "account")
            return await self.client.comet().balance_of(checked)

        return await run_operation("get_balance", op)

    async def get_borrow_balance(self, account: str) -> OperationResult[int]:
        async def op() -> int:
            checked = require_address(account, "account")
            return await self.client.comet().borrow_balance_of(checked)

        return await run_operation("get_borrow_balance", op)

    async def get_collateral_balance(self, account: str, asset: str) -> OperationResult[int]:
        async def op() -> int:
            checked = require_address(account, "account")
            checked_asset = require_address(asset, "asset")
            return await self.client.comet().collateral_balance_of(checked, checked_asset)

        return await run_operation("get_collateral_balance", op)

    async def get_user_basic(self, account: str) -> OperationResult[UserBasic]:
        async def op() -> UserBasic:
            checked = require_address(account, "account")
            return await self.client.comet().user_basic(checked)

        return await run_operation("get_user_basic", op)

    async def has_permission(self, owner: str, manager: str) -> OperationResult[bool]:
        async def op() -> bool:
            checked_owner = require_address(owner, "owner")
            checked_manager = require_address(manager, "manager")
            return await self.client.comet().has_permission(checked_owner, checked_manager)

        return await run_operation("has_permission", op)

    async def get_user_nonce(self, account: str) -> OperationResult[int]:
        async def op() -> int:
            checked = require_address(account, "account")
            return await self.client.comet().user_nonce(checked)

        return await run_operation("get_user_nonce", op)

    async def get_version(self) -> OperationResult[str]:
        return await run_operation("get_version", lambda: self.client.comet().version())

    async def is_borrow_collateralized(self, account: str) -> OperationResult[bool]:
        async def op() -> bool:
            checked = require_address(account, "account")
            return await self.client.comet().is_borrow_collateralized(checked)

        return await run_operation("is_borrow_collateralized", op)

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------

    async def assess_position(
        self, account: str, denomination: Denomination = Denomination.USD
    ) -> OperationResult[HealthAssessment]:
        """Value an account's supply, debt and collateral and band its health.

        Collateral assets come from the account's ``assetsIn`` bitmap and are
        valued at oracle price without collateral factors. The ledger's own
        ``isBorrowCollateralized`` answer is attached unchanged.
        """

        async def op() -> HealthAssessment:
            checked = require_address(account, "account")
            comet = self.client.comet()
            supplied, borrowed, basic, base_feed, decimals, collateralized = await asyncio.gather(
                comet.balance_of(checked),
                comet.borrow_balance_of(checked),
                comet.user_basic(checked),
                comet.base_token_price_feed(),
                comet.decimals(),
                comet.is_borrow_collateralized(checked),
            )
            infos = await asyncio.gather(
                *(comet.get_asset_info(i) for i in basic.asset_indexes())
            )
            base_price, collateral_usd = await asyncio.gather(
                comet.get_price(base_feed), _collateral_value(comet, checked, infos)
            )

            base_scale = scale_for_decimals(decimals)
            price = to_decimal(base_price, PRICE_SCALE)
            supplied_base = to_decimal(supplied, base_scale)
            borrowed_base = to_decimal(borrowed, base_scale)

            if denomination is Denomination.BASE:
                if price == 0:
                    raise UpstreamFailure(ValueError(f"Zero price from base feed {base_feed}"))
                values = (supplied_base, borrowed_base, collateral_usd / price)
            else:
                values = (supplied_base * price, borrowed_base * price, collateral_usd)

            logger.debug(
                "Position %s: supplied=%s borrowed=%s collateral=%s (%s)",
                checked, *values, denomination.value,
            )
            return evaluate_health(
                *values,
                thresholds=self.thresholds,
                ledger_collateralized=collateralized,
                denomination=denomination,
            )

        return await run_operation("assess_position", op)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _submit(self, name: str, send) -> OperationResult[str]:
        async def op() -> str:
            pending: PendingTransaction = await send()
            return await pending.confirm()

        return await run_operation(name, op)

    async def supply(self, asset: str, amount: int) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked_asset = require_address(asset, "asset")
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().supply(checked_asset, checked_amount)

        return await self._submit("supply", send)

    async def supply_to(self, dst: str, asset: str, amount: int) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked_dst = require_address(dst, "dst")
            checked_asset = require_address(asset, "asset")
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().supply_to(checked_dst, checked_asset, checked_amount)

        return await self._submit("supply_to", send)

    async def supply_from(
        self, src: str, dst: str, asset: str, amount: int
    ) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked = (
                require_address(src, "src"),
                require_address(dst, "dst"),
                require_address(asset, "asset"),
            )
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().supply_from(*checked, checked_amount)

        return await self._submit("supply_from", send)

    async def withdraw(self, asset: str, amount: int) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked_asset = require_address(asset, "asset")
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().withdraw(checked_asset, checked_amount)

        return await self._submit("withdraw", send)

    async def withdraw_to(self, to: str, asset: str, amount: int) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked_to = require_address(to, "to")
            checked_asset = require_address(asset, "asset")
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().withdraw_to(checked_to, checked_asset, checked_amount)

        return await self._submit("withdraw_to", send)

    async def withdraw_from(
        self, src: str, to: str, asset: str, amount: int
    ) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked = (
                require_address(src, "src"),
                require_address(to, "to"),
                require_address(asset, "asset"),
            )
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().withdraw_from(*checked, checked_amount)

        return await self._submit("withdraw_from", send)

    async def transfer(self, dst: str, amount: int) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked_dst = require_address(dst, "dst")
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().transfer(checked_dst, checked_amount)

        return await self._submit("transfer", send)

    async def transfer_from(self, src: str, dst: str, amount: int) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked_src = require_address(src, "src")
            checked_dst = require_address(dst, "dst")
            checked_amount = require_positive_amount(amount)
            return await self.client.comet().transfer_from(checked_src, checked_dst, checked_amount)

        return await self._submit("transfer_from", send)

    async def allow(self, manager: str, is_allowed: bool) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked = require_address(manager, "manager")
            return await self.client.comet().allow(checked, bool(is_allowed))

        return await self._submit("allow", send)

    async def allow_by_sig(
        self,
        owner: str,
        manager: str,
        is_allowed: bool,
        nonce: int,
        expiry: int,
        v: int,
        r: bytes,
        s: bytes,
    ) -> OperationResult[str]:
        """Grant or revoke ``manager`` using the owner's EIP-712 signature."""

        async def send() -> PendingTransaction:
            checked_owner = require_address(owner, "owner")
            checked_manager = require_address(manager, "manager")
            signature = (
                require_non_negative_index(nonce, "nonce"),
                require_non_negative_index(expiry, "expiry"),
                require_uint8(v, "v"),
                require_bytes32(r, "r"),
                require_bytes32(s, "s"),
            )
            return await self.client.comet().allow_by_sig(
                checked_owner, checked_manager, bool(is_allowed), *signature
            )

        return await self._submit("allow_by_sig", send)

    async def accrue_account(self, account: str) -> OperationResult[str]:
        async def send() -> PendingTransaction:
            checked = require_address(account, "account")
            return await self.client.comet().accrue_account(checked)

        return await self._submit("accrue_account", send)


async def _collateral_value(
    comet: CometContract, account: str, infos: list[AssetInfo]
) -> Decimal:
    """USD value of ``account``'s collateral across ``infos`` (price scale 1e8)."""
    if not infos:
        return Decimal(0)
    balances = await asyncio.gather(
        *(comet.collateral_balance_of(account, info.asset) for info in infos)
    )
    prices = await asyncio.gather(*(comet.get_price(info.price_feed) for info in infos))
    total = Decimal(0)
    for info, balance, price in zip(infos, balances, prices):
        total += to_decimal(balance, info.scale) * to_decimal(price, PRICE_SCALE)
    return total
