"""Handle for a market's core ledger contract."""
from __future__ import annotations

from ..models import (
    AssetInfo,
    LiquidatorPoints,
    ScaledValue,
    TotalsBasic,
    TotalsCollateral,
    UserBasic,
)
from ..numeric import WAD
from .abi import ContractFunction as Fn
from .base import ContractHandle, PendingTransaction, checksum

_ASSET_INFO = "(uint8,address,address,uint64,uint64,uint64,uint64,uint128)"
_TOTALS_BASIC = "(uint64,uint64,uint64,uint64,uint104,uint104,uint40,uint8)"

# Reads
TOTAL_SUPPLY = Fn("totalSupply", (), ("uint256",))
TOTAL_BORROW = Fn("totalBorrow", (), ("uint256",))
GET_UTILIZATION = Fn("getUtilization", (), ("uint256",))
GET_SUPPLY_RATE = Fn("getSupplyRate", ("uint256",), ("uint256",))
GET_BORROW_RATE = Fn("getBorrowRate", ("uint256",), ("uint256",))
GET_PRICE = Fn("getPrice", ("address",), ("uint128",))
GET_ASSET_INFO = Fn("getAssetInfo", ("uint8",), (_ASSET_INFO,))
GET_ASSET_INFO_BY_ADDRESS = Fn("getAssetInfoByAddress", ("address",), (_ASSET_INFO,))
NUM_ASSETS = Fn("numAssets", (), ("uint8",))
MAX_ASSETS = Fn("maxAssets", (), ("uint8",))
TOTALS_BASIC = Fn("totalsBasic", (), (_TOTALS_BASIC,))
TOTALS_COLLATERAL = Fn("totalsCollateral", ("address",), ("uint128", "uint128"))
BALANCE_OF = Fn("balanceOf", ("address",), ("uint256",))
BORROW_BALANCE_OF = Fn("borrowBalanceOf", ("address",), ("uint256",))
COLLATERAL_BALANCE_OF = Fn("collateralBalanceOf", ("address", "address"), ("uint256",))
USER_BASIC = Fn("userBasic", ("address",), ("(int104,uint64,uint64,uint16)",))
GET_RESERVES = Fn("getReserves", (), ("int256",))
TARGET_RESERVES = Fn("targetReserves", (), ("uint104",))
GET_COLLATERAL_RESERVES = Fn("getCollateralReserves", ("address",), ("uint256",))
QUOTE_COLLATERAL = Fn("quoteCollateral", ("address", "uint256"), ("uint256",))
LIQUIDATOR_POINTS = Fn("liquidatorPoints", ("address",), ("uint32", "uint64", "uint128", "uint32"))
IS_BORROW_COLLATERALIZED = Fn("isBorrowCollateralized", ("address",), ("bool",))
IS_LIQUIDATABLE = Fn("isLiquidatable", ("address",), ("bool",))
HAS_PERMISSION = Fn("hasPermission", ("address", "address"), ("bool",))
USER_NONCE = Fn("userNonce", ("address",), ("uint256",))
VERSION = Fn("version", (), ("string",))
BASE_ACCRUAL_SCALE = Fn("baseAccrualScale", (), ("uint64",))
BASE_INDEX_SCALE = Fn("baseIndexScale", (), ("uint64",))
FACTOR_SCALE = Fn("factorScale", (), ("uint64",))
PRICE_SCALE = Fn("priceScale", (), ("uint64",))
BASE_TOKEN = Fn("baseToken", (), ("address",))
BASE_TOKEN_PRICE_FEED = Fn("baseTokenPriceFeed", (), ("address",))
DECIMALS = Fn("decimals", (), ("uint8",))
BASE_BORROW_MIN = Fn("baseBorrowMin", (), ("uint104",))
BASE_TRACKING_ACCRUED = Fn("baseTrackingAccrued", ("address",), ("uint64",))

# Writes
SUPPLY = Fn("supply", ("address", "uint256"))
SUPPLY_TO = Fn("supplyTo", ("address", "address", "uint256"))
SUPPLY_FROM = Fn("supplyFrom", ("address", "address", "address", "uint256"))
WITHDRAW = Fn("withdraw", ("address", "uint256"))
WITHDRAW_TO = Fn("withdrawTo", ("address", "address", "uint256"))
WITHDRAW_FROM = Fn("withdrawFrom", ("address", "address", "address", "uint256"))
TRANSFER = Fn("transfer", ("address", "uint256"), ("bool",))
TRANSFER_FROM = Fn("transferFrom", ("address", "address", "uint256"), ("bool",))
ABSORB = Fn("absorb", ("address", "address[]"))
BUY_COLLATERAL = Fn("buyCollateral", ("address", "uint256", "uint256", "address"))
ALLOW = Fn("allow", ("address", "bool"))
ALLOW_BY_SIG = Fn(
    "allowBySig",
    ("address", "address", "bool", "uint256", "uint256", "uint8", "bytes32", "bytes32"),
)
ACCRUE_ACCOUNT = Fn("accrueAccount", ("address",))


def _asset_info(raw: tuple) -> AssetInfo:
    offset, asset, price_feed, scale, bcf, lcf, lf, supply_cap = raw
    return AssetInfo(
        offset=offset,
        asset=checksum(asset),
        price_feed=checksum(price_feed),
        scale=scale,
        borrow_collateral_factor=ScaledValue(bcf, WAD),
        liquidate_collateral_factor=ScaledValue(lcf, WAD),
        liquidation_factor=ScaledValue(lf, WAD),
        supply_cap=ScaledValue(supply_cap, scale),
    )


class CometContract(ContractHandle):
    """Typed reads and writes against one market's ledger."""

    label = "ledger address"

    # ------------------------------------------------------------------
    # Market reads
    # ------------------------------------------------------------------

    async def total_supply(self) -> int:
        return await self._call(TOTAL_SUPPLY)

    async def total_borrow(self) -> int:
        return await self._call(TOTAL_BORROW)

    async def get_utilization(self) -> int:
        return await self._call(GET_UTILIZATION)

    async def get_supply_rate(self, utilization: int) -> int:
        return await self._call(GET_SUPPLY_RATE, utilization)

    async def get_borrow_rate(self, utilization: int) -> int:
        return await self._call(GET_BORROW_RATE, utilization)

    async def get_price(self, price_feed: str) -> int:
        """Price from ``price_feed`` scaled by 1e8."""
        return await self._call(GET_PRICE, checksum(price_feed))

    async def get_asset_info(self, index: int) -> AssetInfo:
        return _asset_info(await self._call(GET_ASSET_INFO, index))

    async def get_asset_info_by_address(self, asset: str) -> AssetInfo:
        return _asset_info(await self._call(GET_ASSET_INFO_BY_ADDRESS, checksum(asset)))

    async def num_assets(self) -> int:
        return await self._call(NUM_ASSETS)

    async def max_assets(self) -> int:
        return await self._call(MAX_ASSETS)

    async def totals_basic(self) -> TotalsBasic:
        return TotalsBasic(*await self._call(TOTALS_BASIC))

    async def totals_collateral(self, asset: str) -> TotalsCollateral:
        total, reserved = await self._call(TOTALS_COLLATERAL, checksum(asset))
        return TotalsCollateral(total_supply_asset=total, reserved=reserved)

    async def get_reserves(self) -> int:
        return await self._call(GET_RESERVES)

    async def target_reserves(self) -> int:
        return await self._call(TARGET_RESERVES)

    async def get_collateral_reserves(self, asset: str) -> int:
        return await self._call(GET_COLLATERAL_RESERVES, checksum(asset))

    async def quote_collateral(self, asset: str, base_amount: int) -> int:
        """Collateral obtainable for ``base_amount`` of base asset at the store-front discount."""
        return await self._call(QUOTE_COLLATERAL, checksum(asset), base_amount)

    async def version(self) -> str:
        return await self._call(VERSION)

    async def base_accrual_scale(self) -> int:
        return await self._call(BASE_ACCRUAL_SCALE)

    async def base_index_scale(self) -> int:
        return await self._call(BASE_INDEX_SCALE)

    async def factor_scale(self) -> int:
        return await self._call(FACTOR_SCALE)

    async def price_scale(self) -> int:
        return await self._call(PRICE_SCALE)

    async def base_token(self) -> str:
        return checksum(await self._call(BASE_TOKEN))

    async def base_token_price_feed(self) -> str:
        return checksum(await self._call(BASE_TOKEN_PRICE_FEED))

    async def decimals(self) -> int:
        return await self._call(DECIMALS)

    async def base_borrow_min(self) -> int:
        return await self._call(BASE_BORROW_MIN)

    # ------------------------------------------------------------------
    # Account reads
    # ------------------------------------------------------------------

    async def balance_of(self, account: str) -> int:
        return await self._call(BALANCE_OF, checksum(account))

    async def borrow_balance_of(self, account: str) -> int:
        return await self._call(BORROW_BALANCE_OF, checksum(account))

    async def collateral_balance_of(self, account: str, asset: str) -> int:
        return await self._call(COLLATERAL_BALANCE_OF, checksum(account), checksum(asset))

    async def user_basic(self, account: str) -> UserBasic:
        principal, tracking_index, tracking_accrued, assets_in = await self._call(
            USER_BASIC, checksum(account)
        )
        return UserBasic(
            principal=principal,
            base_tracking_index=tracking_index,
            base_tracking_accrued=tracking_accrued,
            assets_in=assets_in,
        )

    async def liquidator_points(self, account: str) -> LiquidatorPoints:
        num_absorbs, num_absorbed, approx_spend, _ = await self._call(
            LIQUIDATOR_POINTS, checksum(account)
        )
        return LiquidatorPoints(
            num_absorbs=num_absorbs, num_absorbed=num_absorbed, approx_spend=approx_spend
        )

    async def is_borrow_collateralized(self, account: str) -> bool:
        return await self._call(IS_BORROW_COLLATERALIZED, checksum(account))

    async def is_liquidatable(self, account: str) -> bool:
        return await self._call(IS_LIQUIDATABLE, checksum(account))

    async def has_permission(self, owner: str, manager: str) -> bool:
        return await self._call(HAS_PERMISSION, checksum(owner), checksum(manager))

    async def user_nonce(self, account: str) -> int:
        return await self._call(USER_NONCE, checksum(account))

    async def base_tracking_accrued(self, account: str) -> int:
        return await self._call(BASE_TRACKING_ACCRUED, checksum(account))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def supply(self, asset: str, amount: int) -> PendingTransaction:
        return await self._transact(SUPPLY, checksum(asset), amount)

    async def supply_to(self, dst: str, asset: str, amount: int) -> PendingTransaction:
        return await self._transact(SUPPLY_TO, checksum(dst), checksum(asset), amount)

    async def supply_from(
        self, src: str, dst: str, asset: str, amount: int
    ) -> PendingTransaction:
        return await self._transact(
            SUPPLY_FROM, checksum(src), checksum(dst), checksum(asset), amount
        )

    async def withdraw(self, asset: str, amount: int) -> PendingTransaction:
        return await self._transact(WITHDRAW, checksum(asset), amount)

    async def withdraw_to(self, to: str, asset: str, amount: int) -> PendingTransaction:
        return await self._transact(WITHDRAW_TO, checksum(to), checksum(asset), amount)

    async def withdraw_from(
        self, src: str, to: str, asset: str, amount: int
    ) -> PendingTransaction:
        return await self._transact(
            WITHDRAW_FROM, checksum(src), checksum(to), checksum(asset), amount
        )

    async def transfer(self, dst: str, amount: int) -> PendingTransaction:
        return await self._transact(TRANSFER, checksum(dst), amount)

    async def transfer_from(self, src: str, dst: str, amount: int) -> PendingTransaction:
        return await self._transact(TRANSFER_FROM, checksum(src), checksum(dst), amount)

    async def absorb(self, absorber: str, accounts: list[str]) -> PendingTransaction:
        return await self._transact(
            ABSORB, checksum(absorber), [checksum(a) for a in accounts]
        )

    async def buy_collateral(
        self, asset: str, min_amount: int, base_amount: int, recipient: str
    ) -> PendingTransaction:
        return await self._transact(
            BUY_COLLATERAL, checksum(asset), min_amount, base_amount, checksum(recipient)
        )

    async def allow(self, manager: str, is_allowed: bool) -> PendingTransaction:
        return await self._transact(ALLOW, checksum(manager), is_allowed)

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
    ) -> PendingTransaction:
        return await self._transact(
            ALLOW_BY_SIG, checksum(owner), checksum(manager), is_allowed, nonce, expiry, v, r, s
        )

    async def accrue_account(self, account: str) -> PendingTransaction:
        return await self._transact(ACCRUE_ACCOUNT, checksum(account))
