"""Unit tests for the client-side health evaluator."""
from __future__ import annotations

from decimal import Decimal

from comet_client.config import HealthThresholds
from comet_client.health import (
    INFINITE_HEALTH,
    classify,
    evaluate_health,
    format_health_factor,
    health_factor,
)
from comet_client.models import Denomination, HealthStatus


class TestHealthFactor:
    def test_no_debt_is_infinite(self) -> None:
        assert health_factor(Decimal(1000), Decimal(0)) == INFINITE_HEALTH
        assert health_factor(Decimal(1000), None) == INFINITE_HEALTH

    def test_no_debt_no_collateral_is_infinite(self) -> None:
        assert health_factor(Decimal(0), Decimal(0)).is_infinite()

    def test_ratio(self) -> None:
        assert health_factor(Decimal(2000), Decimal(1000)) == Decimal(2)

    def test_full_precision_kept(self) -> None:
        factor = health_factor(Decimal(1), Decimal(3))
        assert str(factor).startswith("0.3333333333333333333333333333333")


class TestClassify:
    def test_bands(self) -> None:
        assert classify(Decimal("1.19")) is HealthStatus.CRITICAL
        assert classify(Decimal("1.2")) is HealthStatus.WARNING
        assert classify(Decimal("1.49")) is HealthStatus.WARNING
        assert classify(Decimal("1.5")) is HealthStatus.SAFE
        assert classify(INFINITE_HEALTH) is HealthStatus.SAFE

    def test_custom_thresholds(self) -> None:
        thresholds = HealthThresholds(warning=2.0, critical=1.5)
        assert classify(Decimal("1.6"), thresholds) is HealthStatus.WARNING
        assert classify(Decimal("1.4"), thresholds) is HealthStatus.CRITICAL


class TestEvaluateHealth:
    def test_double_collateral(self) -> None:
        assessment = evaluate_health(Decimal(0), Decimal(1000), Decimal(2000))
        assert assessment.health_factor == Decimal("2.0")
        assert assessment.status is HealthStatus.SAFE
        assert assessment.has_debt
        assert assessment.is_collateralized is None

    def test_debt_free_account(self) -> None:
        assessment = evaluate_health(Decimal(500), Decimal(0), Decimal(0))
        assert assessment.health_factor == INFINITE_HEALTH
        assert not assessment.has_debt
        assert assessment.status is HealthStatus.SAFE

    def test_ledger_answer_carried_unchanged(self) -> None:
        # A display-critical ratio does not override the ledger's verdict
        assessment = evaluate_health(
            Decimal(0),
            Decimal(1000),
            Decimal(1100),
            ledger_collateralized=True,
            denomination=Denomination.BASE,
        )
        assert assessment.status is HealthStatus.CRITICAL
        assert assessment.is_collateralized is True
        assert assessment.denomination is Denomination.BASE


class TestFormat:
    def test_two_places(self) -> None:
        assert format_health_factor(Decimal("1.23456")) == "1.23"
        assert format_health_factor(Decimal(2)) == "2.00"

    def test_infinite(self) -> None:
        assert format_health_factor(INFINITE_HEALTH) == "∞"
