"""Market-wide reads: rates, totals, reserves, asset and configuration data."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..client import CometClient
from ..errors import StaleResponse
from ..models import (
    AssetInfo,
    BaseAssetMarketInfo,
    MarketConfiguration,
    OperationResult,
    RateSample,
    TotalsBasic,
    TotalsCollateral,
    UtilizationSample,
)
from ..operations import require_address, require_non_negative_index, run_operation
from ..rates import fetch_borrow_rate, fetch_supply_rate, fetch_utilization

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketSnapshot:
    """Rates of one market read at one utilization."""

    market: str | None
    ledger_address: str
    utilization: UtilizationSample
    supply: RateSample
    borrow: RateSample


class MarketService:
    """Market reads for the market a CometClient currently addresses."""

    def __init__(self, client: CometClient) -> None:
        self.client = client
        self._snapshot: MarketSnapshot | None = None
        self._snapshot_generation = -1

    @property
    def snapshot(self) -> MarketSnapshot | None:
        """Last rates that belong to the client's current market, if any."""
        if self._snapshot is None or not self.client.is_current(self._snapshot_generation):
            return None
        return self._snapshot

    # ------------------------------------------------------------------
    # Rates
    # ------------------------------------------------------------------

    async def get_utilization(self) -> OperationResult[UtilizationSample]:
        async def op() -> UtilizationSample:
            return await fetch_utilization(self.client.comet())

        return await run_operation("get_utilization", op)

    async def get_supply_rate(
        self, utilization: int | None = None
    ) -> OperationResult[RateSample]:
        """Supply rate at ``utilization`` (raw, 1e18), or at the live utilization."""

        async def op() -> RateSample:
            if utilization is not None:
                require_non_negative_index(utilization, "utilization")
            return await fetch_supply_rate(self.client.comet(), utilization)

        return await run_operation("get_supply_rate", op)

    async def get_borrow_rate(
        self, utilization: int | None = None
    ) -> OperationResult[RateSample]:
        async def op() -> RateSample:
            if utilization is not None:
                require_non_negative_index(utilization, "utilization")
            return await fetch_borrow_rate(self.client.comet(), utilization)

        return await run_operation("get_borrow_rate", op)

    async def refresh_rates(self) -> OperationResult[MarketSnapshot]:
        """Re-read utilization and both rates for the current market.

        Both rates are quoted at the same utilization reading. A response that
        arrives after the client switched endpoints is discarded and reported
        as a failure; any failure clears the kept snapshot.
        """
        token = self.client.begin_request()
        state = self.client.state

        async def op() -> MarketSnapshot:
            comet = self.client.comet()
            utilization = await fetch_utilization(comet)
            supply, borrow = await asyncio.gather(
                fetch_supply_rate(comet, utilization.raw.raw),
                fetch_borrow_rate(comet, utilization.raw.raw),
            )
            return MarketSnapshot(
                market=state.active_market,
                ledger_address=comet.address,
                utilization=utilization,
                supply=supply,
                borrow=borrow,
            )

        result = await run_operation("refresh_rates", op)
        if not self.client.is_current(token):
            logger.debug("Discarding rates for %s: endpoints changed", state.ledger_address)
            return OperationResult.failure(StaleResponse(state.ledger_address))
        self._snapshot = result.value if result.ok else None
        self._snapshot_generation = token
        return result

    # ------------------------------------------------------------------
    # Totals and reserves
    # ------------------------------------------------------------------

    async def get_total_supply(self) -> OperationResult[int]:
        return await run_operation("get_total_supply", lambda: self.client.comet().total_supply())

    async def get_total_borrow(self) -> OperationResult[int]:
        return await run_operation("get_total_borrow", lambda: self.client.comet().total_borrow())

    async def get_totals_basic(self) -> OperationResult[TotalsBasic]:
        return await run_operation("get_totals_basic", lambda: self.client.comet().totals_basic())

    async def get_total_collateral(self, asset: str) -> OperationResult[TotalsCollateral]:
        async def op() -> TotalsCollateral:
            checked = require_address(asset, "asset")
            return await self.client.comet().totals_collateral(checked)

        return await run_operation("get_total_collateral", op)

    async def get_reserves(self) -> OperationResult[int]:
        return await run_operation("get_reserves", lambda: self.client.comet().get_reserves())

    async def get_target_reserves(self) -> OperationResult[int]:
        return await run_operation(
            "get_target_reserves", lambda: self.client.comet().target_reserves()
        )

    # ------------------------------------------------------------------
    # Assets, prices and parameters
    # ------------------------------------------------------------------

    async def get_asset_info(self, index: int) -> OperationResult[AssetInfo]:
        async def op() -> AssetInfo:
            checked = require_non_negative_index(index)
            return await self.client.comet().get_asset_info(checked)

        return await run_operation("get_asset_info", op)

    async def get_asset_info_by_address(self, asset: str) -> OperationResult[AssetInfo]:
        async def op() -> AssetInfo:
            checked = require_address(asset, "asset")
            return await self.client.comet().get_asset_info_by_address(checked)

        return await run_operation("get_asset_info_by_address", op)

    async def get_price(self, price_feed: str) -> OperationResult[int]:
        async def op() -> int:
            checked = require_address(price_feed, "price_feed")
            return await self.client.comet().get_price(checked)

        return await run_operation("get_price", op)

    async def get_max_assets(self) -> OperationResult[int]:
        return await run_operation("get_max_assets", lambda: self.client.comet().max_assets())

    async def get_scales(self) -> OperationResult[dict[str, int]]:
        """baseAccrualScale, baseIndexScale, factorScale and priceScale in one call."""

        async def op() -> dict[str, int]:
            comet = self.client.comet()
            accrual, index, factor, price = await asyncio.gather(
                comet.base_accrual_scale(),
                comet.base_index_scale(),
                comet.factor_scale(),
                comet.price_scale(),
            )
            return {
                "base_accrual_scale": accrual,
                "base_index_scale": index,
                "factor_scale": factor,
                "price_scale": price,
            }

        return await run_operation("get_scales", op)

    async def get_base_borrow_min(self) -> OperationResult[int]:
        return await run_operation(
            "get_base_borrow_min", lambda: self.client.comet().base_borrow_min()
        )

    async def get_base_asset_market_info(self) -> OperationResult[BaseAssetMarketInfo]:
        async def op() -> BaseAssetMarketInfo:
            comet = self.client.comet()
            (
                base_token,
                price_feed,
                decimals,
                borrow_min,
                target_reserves,
                total_supply,
                total_borrow,
            ) = await asyncio.gather(
                comet.base_token(),
                comet.base_token_price_feed(),
                comet.decimals(),
                comet.base_borrow_min(),
                comet.target_reserves(),
                comet.total_supply(),
                comet.total_borrow(),
            )
            return BaseAssetMarketInfo(
                base_token=base_token,
                base_token_price_feed=price_feed,
                decimals=decimals,
                base_borrow_min=borrow_min,
                target_reserves=target_reserves,
                total_supply=total_supply,
                total_borrow=total_borrow,
            )

        return await run_operation("get_base_asset_market_info", op)

    async def get_configuration(self) -> OperationResult[MarketConfiguration]:
        async def op() -> MarketConfiguration:
            ledger = self.client.comet().address
            return await self.client.configurator().get_configuration(ledger)

        return await run_operation("get_configuration", op)
