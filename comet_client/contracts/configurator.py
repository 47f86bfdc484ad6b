"""Handle for the configurator that stores each market's parameters."""
from __future__ import annotations

from ..models import AssetConfiguration, MarketConfiguration, ScaledValue
from ..numeric import WAD
from .abi import ContractFunction as Fn
from .base import ContractHandle, checksum

_ASSET_CONFIG = "(address,address,uint8,uint64,uint64,uint64,uint128)"
_CONFIGURATION = (
    "(address,address,address,address,address,"
    "uint64,uint64,uint64,uint64,uint64,uint64,uint64,uint64,"
    "uint64,uint64,uint64,uint64,"
    f"uint104,uint104,uint104,{_ASSET_CONFIG}[])"
)

GET_CONFIGURATION = Fn("getConfiguration", ("address",), (_CONFIGURATION,))
FACTORY = Fn("factory", ("address",), ("address",))


def _asset_configuration(raw: tuple) -> AssetConfiguration:
    asset, price_feed, decimals, bcf, lcf, lf, supply_cap = raw
    return AssetConfiguration(
        asset=checksum(asset),
        price_feed=checksum(price_feed),
        decimals=decimals,
        borrow_collateral_factor=ScaledValue(bcf, WAD),
        liquidate_collateral_factor=ScaledValue(lcf, WAD),
        liquidation_factor=ScaledValue(lf, WAD),
        supply_cap=supply_cap,
    )


def parse_configuration(raw: tuple) -> MarketConfiguration:
    (
        governor,
        pause_guardian,
        base_token,
        base_token_price_feed,
        extension_delegate,
        supply_kink,
        supply_slope_low,
        supply_slope_high,
        supply_base,
        borrow_kink,
        borrow_slope_low,
        borrow_slope_high,
        borrow_base,
        store_front_price_factor,
        tracking_index_scale,
        base_tracking_supply_speed,
        base_tracking_borrow_speed,
        base_min_for_rewards,
        base_borrow_min,
        target_reserves,
        asset_configs,
    ) = raw
    return MarketConfiguration(
        governor=checksum(governor),
        pause_guardian=checksum(pause_guardian),
        base_token=checksum(base_token),
        base_token_price_feed=checksum(base_token_price_feed),
        extension_delegate=checksum(extension_delegate),
        supply_kink=ScaledValue(supply_kink, WAD),
        supply_per_year_interest_rate_slope_low=ScaledValue(supply_slope_low, WAD),
        supply_per_year_interest_rate_slope_high=ScaledValue(supply_slope_high, WAD),
        supply_per_year_interest_rate_base=ScaledValue(supply_base, WAD),
        borrow_kink=ScaledValue(borrow_kink, WAD),
        borrow_per_year_interest_rate_slope_low=ScaledValue(borrow_slope_low, WAD),
        borrow_per_year_interest_rate_slope_high=ScaledValue(borrow_slope_high, WAD),
        borrow_per_year_interest_rate_base=ScaledValue(borrow_base, WAD),
        store_front_price_factor=ScaledValue(store_front_price_factor, WAD),
        tracking_index_scale=tracking_index_scale,
        base_tracking_supply_speed=base_tracking_supply_speed,
        base_tracking_borrow_speed=base_tracking_borrow_speed,
        base_min_for_rewards=base_min_for_rewards,
        base_borrow_min=base_borrow_min,
        target_reserves=target_reserves,
        asset_configs=tuple(_asset_configuration(a) for a in asset_configs),
    )


class ConfiguratorContract(ContractHandle):
    label = "configurator address"

    async def get_configuration(self, comet: str) -> MarketConfiguration:
        return parse_configuration(await self._call(GET_CONFIGURATION, checksum(comet)))

    async def factory(self, comet: str) -> str:
        return checksum(await self._call(FACTORY, checksum(comet)))
