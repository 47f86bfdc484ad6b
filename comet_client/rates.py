"""Rate derivation: per-second ledger rates to APR/APY, utilization to percent."""
from __future__ import annotations

import logging
from decimal import MAX_EMAX, MIN_EMIN, Decimal, localcontext
from typing import TYPE_CHECKING

from .models import RateSample, ScaledValue, UtilizationSample
from .numeric import PERCENT, WAD, to_decimal

if TYPE_CHECKING:
    from .contracts.comet import CometContract

logger = logging.getLogger(__name__)

# Non-leap year; the ledger's own annualisation uses the same convention
SECONDS_PER_YEAR = 60 * 60 * 24 * 365

_APY_PRECISION = 100


def utilization_percent(raw: int) -> Decimal:
    """Return utilization as a percentage (``1e18`` -> ``100``).

    Values outside [0, 100] are returned as-is and logged.
    """
    percent = to_decimal(raw, WAD) * PERCENT
    if percent < 0 or percent > PERCENT:
        logger.warning("Utilization outside [0, 100]%%: %s", percent)
    return percent


def to_apr(rate_per_second: int) -> Decimal:
    """Simple annualised rate in percent: ``r * SECONDS_PER_YEAR * 100``."""
    with localcontext() as ctx:
        ctx.prec = _APY_PRECISION
        return to_decimal(rate_per_second, WAD) * SECONDS_PER_YEAR * PERCENT


def to_apy(rate_per_second: int) -> Decimal:
    """Per-second compounded yield in percent: ``((1 + r) ** SECONDS_PER_YEAR - 1) * 100``."""
    with localcontext() as ctx:
        ctx.prec = _APY_PRECISION
        # Compounding a large per-second rate over a year needs the full exponent range
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        rate = to_decimal(rate_per_second, WAD)
        return ((1 + rate) ** SECONDS_PER_YEAR - 1) * PERCENT


def utilization_sample(raw: int) -> UtilizationSample:
    return UtilizationSample(raw=ScaledValue(raw, WAD), percent=utilization_percent(raw))


def derive_rate_sample(rate_per_second: int, utilization: int | None = None) -> RateSample:
    """Build a RateSample from a raw per-second rate and the utilization it was quoted at."""
    return RateSample(
        rate_per_second=ScaledValue(rate_per_second, WAD),
        apr=to_apr(rate_per_second),
        apy=to_apy(rate_per_second),
        utilization=ScaledValue(utilization, WAD) if utilization is not None else None,
    )


# ---------------------------------------------------------------------------
# Ledger-backed entry points
# ---------------------------------------------------------------------------


async def fetch_utilization(comet: CometContract) -> UtilizationSample:
    raw = await comet.get_utilization()
    return utilization_sample(raw)


async def fetch_supply_rate(comet: CometContract, utilization: int | None = None) -> RateSample:
    """Supply rate at ``utilization``; the current utilization is read when omitted."""
    if utilization is None:
        utilization = await comet.get_utilization()
    rate = await comet.get_supply_rate(utilization)
    return derive_rate_sample(rate, utilization)


async def fetch_borrow_rate(comet: CometContract, utilization: int | None = None) -> RateSample:
    """Borrow rate at ``utilization``; the current utilization is read when omitted."""
    if utilization is None:
        utilization = await comet.get_utilization()
    rate = await comet.get_borrow_rate(utilization)
    return derive_rate_sample(rate, utilization)
