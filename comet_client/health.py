"""Client-side position health: a display signal, not the ledger's liquidation check.

Whether an account is collateralized or liquidatable is decided by the ledger
(``isBorrowCollateralized`` / ``isLiquidatable``). The factor computed here
only drives UI bands.
"""
from __future__ import annotations

from decimal import Decimal, localcontext

from .config import HealthThresholds
from .models import Denomination, HealthAssessment, HealthStatus

INFINITE_HEALTH = Decimal("Infinity")

_PRECISION = 100


def health_factor(collateral: Decimal, borrowed: Decimal | None) -> Decimal:
    """``collateral / borrowed``; no debt means INFINITE_HEALTH."""
    if borrowed is None or borrowed == 0:
        return INFINITE_HEALTH
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(collateral) / Decimal(borrowed)


def classify(factor: Decimal, thresholds: HealthThresholds | None = None) -> HealthStatus:
    thresholds = thresholds or HealthThresholds()
    if factor < Decimal(str(thresholds.critical)):
        return HealthStatus.CRITICAL
    if factor < Decimal(str(thresholds.warning)):
        return HealthStatus.WARNING
    return HealthStatus.SAFE


def evaluate_health(
    supplied: Decimal,
    borrowed: Decimal,
    collateral: Decimal,
    thresholds: HealthThresholds | None = None,
    ledger_collateralized: bool | None = None,
    denomination: Denomination = Denomination.USD,
) -> HealthAssessment:
    """Combine values already expressed in one denomination into an assessment.

    Args:
        supplied: Base asset supplied by the account.
        borrowed: Base asset borrowed by the account.
        collateral: Sum of the account's collateral values (unweighted).
        thresholds: Display bands; defaults to 1.2 / 1.5.
        ledger_collateralized: The ledger's ``isBorrowCollateralized`` answer,
            carried through unchanged when known.
        denomination: Unit of the three values.
    """
    factor = health_factor(collateral, borrowed)
    return HealthAssessment(
        supplied_value=supplied,
        borrowed_value=borrowed,
        collateral_value=collateral,
        health_factor=factor,
        status=classify(factor, thresholds),
        is_collateralized=ledger_collateralized,
        denomination=denomination,
    )


def format_health_factor(factor: Decimal) -> str:
    if factor.is_infinite():
        return "∞"
    return f"{factor.quantize(Decimal('0.01')):f}"
