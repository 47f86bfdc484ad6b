"""Async client for Compound III style lending markets."""
from .client import CometClient
from .config import AppConfig, HealthThresholds, NetworkMarketRegistry, load_config, load_registry
from .errors import (
    CometClientError,
    ContractUnavailable,
    InvalidAmount,
    MissingArgument,
    NotInitialized,
    StaleResponse,
    UpstreamFailure,
)
from .health import INFINITE_HEALTH, evaluate_health, format_health_factor
from .models import Denomination, HealthAssessment, HealthStatus, OperationResult, RateSample
from .rates import SECONDS_PER_YEAR, to_apr, to_apy, utilization_percent
from .resolver import EndpointResolver, resolve_endpoints
from .services import AccountService, LiquidationService, MarketService, RewardsService

__all__ = [
    "AccountService",
    "AppConfig",
    "CometClient",
    "CometClientError",
    "ContractUnavailable",
    "Denomination",
    "EndpointResolver",
    "HealthAssessment",
    "HealthStatus",
    "HealthThresholds",
    "INFINITE_HEALTH",
    "InvalidAmount",
    "LiquidationService",
    "MarketService",
    "MissingArgument",
    "NetworkMarketRegistry",
    "NotInitialized",
    "OperationResult",
    "RateSample",
    "RewardsService",
    "SECONDS_PER_YEAR",
    "StaleResponse",
    "UpstreamFailure",
    "evaluate_health",
    "format_health_factor",
    "load_config",
    "load_registry",
    "resolve_endpoints",
    "to_apr",
    "to_apy",
    "utilization_percent",
]
