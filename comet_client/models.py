"""Data models, all frozen."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Generic, TypeVar

from .errors import CometClientError
from .numeric import WAD, scale_exponent, to_decimal

T = TypeVar("T")


@dataclass(frozen=True)
class ScaledValue:
    """A raw ledger integer plus the power of ten it is scaled by."""

    raw: int
    scale: int = WAD

    def __post_init__(self) -> None:
        scale_exponent(self.scale)

    def to_decimal(self, places: int | None = None) -> Decimal:
        return to_decimal(self.raw, self.scale, places)

    def rescale(self, scale: int) -> ScaledValue:
        """Express the same quantity with another scale (truncating)."""
        source, target = scale_exponent(self.scale), scale_exponent(scale)
        if target >= source:
            return ScaledValue(self.raw * 10 ** (target - source), scale)
        truncated = abs(self.raw) // 10 ** (source - target)
        return ScaledValue(truncated if self.raw >= 0 else -truncated, scale)

    def __add__(self, other: ScaledValue) -> ScaledValue:
        if not isinstance(other, ScaledValue):
            return NotImplemented
        if other.scale != self.scale:
            raise ValueError(
                f"Cannot combine scales {self.scale} and {other.scale}; rescale first"
            )
        return ScaledValue(self.raw + other.raw, self.scale)

    def __sub__(self, other: ScaledValue) -> ScaledValue:
        if not isinstance(other, ScaledValue):
            return NotImplemented
        if other.scale != self.scale:
            raise ValueError(
                f"Cannot combine scales {self.scale} and {other.scale}; rescale first"
            )
        return ScaledValue(self.raw - other.raw, self.scale)


# ---------------------------------------------------------------------------
# Derived metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UtilizationSample:
    raw: ScaledValue
    percent: Decimal


@dataclass(frozen=True)
class RateSample:
    """Per-second rate with its annualised forms (percentages)."""

    rate_per_second: ScaledValue
    apr: Decimal
    apy: Decimal
    utilization: ScaledValue | None = None


class HealthStatus(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"


class Denomination(str, Enum):
    USD = "usd"
    BASE = "base"


@dataclass(frozen=True)
class HealthAssessment:
    """Client-side display signal; not the ledger's liquidation check."""

    supplied_value: Decimal
    borrowed_value: Decimal
    collateral_value: Decimal
    health_factor: Decimal
    status: HealthStatus
    is_collateralized: bool | None = None
    denomination: Denomination = Denomination.USD

    @property
    def has_debt(self) -> bool:
        return not self.health_factor.is_infinite()


# ---------------------------------------------------------------------------
# Ledger structs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssetInfo:
    offset: int
    asset: str
    price_feed: str
    scale: int
    borrow_collateral_factor: ScaledValue
    liquidate_collateral_factor: ScaledValue
    liquidation_factor: ScaledValue
    supply_cap: ScaledValue


@dataclass(frozen=True)
class UserBasic:
    principal: int
    base_tracking_index: int
    base_tracking_accrued: int
    assets_in: int

    def asset_indexes(self) -> tuple[int, ...]:
        """Offsets of the collateral assets flagged in the ``assetsIn`` bitmap."""
        return tuple(i for i in range(self.assets_in.bit_length()) if self.assets_in >> i & 1)


@dataclass(frozen=True)
class TotalsBasic:
    base_supply_index: int
    base_borrow_index: int
    tracking_supply_index: int
    tracking_borrow_index: int
    total_supply_base: int
    total_borrow_base: int
    last_accrual_time: int
    pause_flags: int


@dataclass(frozen=True)
class TotalsCollateral:
    total_supply_asset: int
    reserved: int


@dataclass(frozen=True)
class LiquidatorPoints:
    num_absorbs: int
    num_absorbed: int
    approx_spend: int


@dataclass(frozen=True)
class RewardOwed:
    token: str
    owed: int


@dataclass(frozen=True)
class BaseAssetMarketInfo:
    base_token: str
    base_token_price_feed: str
    decimals: int
    base_borrow_min: int
    target_reserves: int
    total_supply: int
    total_borrow: int


@dataclass(frozen=True)
class AssetConfiguration:
    asset: str
    price_feed: str
    decimals: int
    borrow_collateral_factor: ScaledValue
    liquidate_collateral_factor: ScaledValue
    liquidation_factor: ScaledValue
    supply_cap: int


@dataclass(frozen=True)
class MarketConfiguration:
    """Configurator view of a market; interest-rate fields are per-year x 1e18."""

    governor: str
    pause_guardian: str
    base_token: str
    base_token_price_feed: str
    extension_delegate: str
    supply_kink: ScaledValue
    supply_per_year_interest_rate_slope_low: ScaledValue
    supply_per_year_interest_rate_slope_high: ScaledValue
    supply_per_year_interest_rate_base: ScaledValue
    borrow_kink: ScaledValue
    borrow_per_year_interest_rate_slope_low: ScaledValue
    borrow_per_year_interest_rate_slope_high: ScaledValue
    borrow_per_year_interest_rate_base: ScaledValue
    store_front_price_factor: ScaledValue
    tracking_index_scale: int
    base_tracking_supply_speed: int
    base_tracking_borrow_speed: int
    base_min_for_rewards: int
    base_borrow_min: int
    target_reserves: int
    asset_configs: tuple[AssetConfiguration, ...] = ()


@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: str
    block_number: int
    status: int

    @property
    def succeeded(self) -> bool:
        return self.status == 1


# ---------------------------------------------------------------------------
# Operation outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Explicit success/failure outcome of one client operation."""

    value: T | None = None
    error: CometClientError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> OperationResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: CometClientError) -> OperationResult[T]:
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
