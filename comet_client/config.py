"""Configuration loader: reads YAML, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).resolve().parent / "networks.yaml"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NativeCurrency:
    name: str = "Ether"
    symbol: str = "ETH"
    decimals: int = 18


@dataclass(frozen=True)
class MarketConfig:
    """One deployment of the ledger for a base asset on one chain."""

    name: str
    ledger_address: str
    base_asset_symbol: str
    rewards_address: str | None = None
    configurator_address: str | None = None


@dataclass(frozen=True)
class NetworkConfig:
    chain_id: int
    name: str = ""
    rpc_endpoints: tuple[str, ...] = ()
    block_explorer_url: str = ""
    native_currency: NativeCurrency = field(default_factory=NativeCurrency)
    markets: tuple[MarketConfig, ...] = ()

    def get_market(self, name: str) -> MarketConfig | None:
        for market in self.markets:
            if market.name == name:
                return market
        return None


@dataclass(frozen=True)
class NetworkMarketRegistry:
    """Static chain -> market -> addresses mapping loaded at startup."""

    networks: dict[int, NetworkConfig] = field(default_factory=dict)

    def chain_ids(self) -> list[int]:
        return list(self.networks)

    def get_network(self, chain_id: int) -> NetworkConfig | None:
        return self.networks.get(chain_id)

    def get_market(self, chain_id: int, name: str | None) -> MarketConfig | None:
        network = self.networks.get(chain_id)
        if network is None or not name:
            return None
        return network.get_market(name)

    def first_market(self, chain_id: int) -> MarketConfig | None:
        network = self.networks.get(chain_id)
        if network is None or not network.markets:
            return None
        return network.markets[0]

    def market_names(self, chain_id: int) -> list[str]:
        network = self.networks.get(chain_id)
        if network is None:
            return []
        return [m.name for m in network.markets]


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30
    receipt_poll_interval: float = 2.0
    receipt_timeout: float = 180.0


@dataclass(frozen=True)
class HealthThresholds:
    """Display bands for the client-side health factor.

    Presentation policy only; they do not mirror the ledger's liquidation math.
    """

    warning: float = 1.5
    critical: float = 1.2


@dataclass(frozen=True)
class ClientConfig:
    chain_id: int = 1
    market: str | None = None
    ledger_address: str | None = None
    rewards_address: str | None = None
    configurator_address: str | None = None
    account: str | None = None


@dataclass(frozen=True)
class AppConfig:
    client: ClientConfig = field(default_factory=ClientConfig)
    rpc: ChainConfig = field(default_factory=ChainConfig)
    health: HealthThresholds = field(default_factory=HealthThresholds)
    registry_path: str | None = None


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return _interpolate_env(raw)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _checksum(value: str | None, where: str) -> str | None:
    if value is None:
        return None
    if not is_address(value):
        raise ValueError(f"{where}: invalid address '{value}'")
    return to_checksum_address(value)


# ---------------------------------------------------------------------------
# Registry YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_market(raw: dict[str, Any], chain_id: int) -> MarketConfig:
    name = _optional_str(raw.get("name"))
    if not name:
        raise ValueError(f"Chain {chain_id}: market without a name")
    where = f"Chain {chain_id} market '{name}'"
    ledger = _optional_str(raw.get("ledger"))
    if not ledger:
        raise ValueError(f"{where} has no ledger address")
    base_asset = _optional_str(raw.get("base_asset"))
    if not base_asset:
        raise ValueError(f"{where} has no base asset")
    return MarketConfig(
        name=name,
        ledger_address=_checksum(ledger, where),
        base_asset_symbol=base_asset,
        rewards_address=_checksum(_optional_str(raw.get("rewards")), where),
        configurator_address=_checksum(_optional_str(raw.get("configurator")), where),
    )


def _build_network(chain_key: Any, raw: dict[str, Any]) -> NetworkConfig:
    try:
        chain_id = int(chain_key)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid chain id '{chain_key}'") from None
    if chain_id <= 0:
        raise ValueError(f"Invalid chain id '{chain_key}'")

    markets_raw = raw.get("markets") or []
    if not markets_raw:
        raise ValueError(f"Chain {chain_id} has no markets")

    markets: list[MarketConfig] = []
    seen: set[str] = set()
    for market_raw in markets_raw:
        market = _build_market(market_raw, chain_id)
        if market.name in seen:
            raise ValueError(f"Chain {chain_id}: duplicate market '{market.name}'")
        seen.add(market.name)
        markets.append(market)

    currency = raw.get("native_currency", {})
    return NetworkConfig(
        chain_id=chain_id,
        name=raw.get("name", ""),
        rpc_endpoints=tuple(e for e in raw.get("rpc_endpoints", []) if e),
        block_explorer_url=raw.get("block_explorer_url", ""),
        native_currency=NativeCurrency(
            name=currency.get("name", NativeCurrency.name),
            symbol=currency.get("symbol", NativeCurrency.symbol),
            decimals=int(currency.get("decimals", NativeCurrency.decimals)),
        ),
        markets=tuple(markets),
    )


def build_registry(raw: dict[str, Any]) -> NetworkMarketRegistry:
    """Build and validate a registry from an already-parsed mapping."""
    networks: dict[int, NetworkConfig] = {}
    for chain_key, network_raw in (raw.get("networks") or {}).items():
        network = _build_network(chain_key, network_raw or {})
        if network.chain_id in networks:
            raise ValueError(f"Duplicate chain id {network.chain_id}")
        networks[network.chain_id] = network
    return NetworkMarketRegistry(networks=networks)


def load_registry(path: str | Path | None = None) -> NetworkMarketRegistry:
    """Load the network/market registry.

    Args:
        path: Registry YAML file. Defaults to the ``networks.yaml`` shipped
            with the package.
    """
    registry_path = Path(path) if path is not None else DEFAULT_REGISTRY_PATH
    registry = build_registry(_read_yaml(registry_path))
    logger.debug(
        "Registry loaded from %s (%d networks)", registry_path, len(registry.networks)
    )
    return registry


# ---------------------------------------------------------------------------
# Client YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_client(raw: dict[str, Any]) -> ClientConfig:
    chain_id = raw.get("chain_id")
    if chain_id is None:
        raise ValueError("client.chain_id is required")
    return ClientConfig(
        chain_id=int(chain_id),
        market=_optional_str(raw.get("market")),
        ledger_address=_checksum(_optional_str(raw.get("ledger_address")), "client"),
        rewards_address=_checksum(_optional_str(raw.get("rewards_address")), "client"),
        configurator_address=_checksum(
            _optional_str(raw.get("configurator_address")), "client"
        ),
        account=_checksum(_optional_str(raw.get("account")), "client"),
    )


def _build_rpc(raw: dict[str, Any]) -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=tuple(e for e in raw.get("endpoints", []) if e),
        rpc_timeout=int(raw.get("timeout", 30)),
        receipt_poll_interval=float(raw.get("receipt_poll_interval", 2.0)),
        receipt_timeout=float(raw.get("receipt_timeout", 180.0)),
    )


def _build_health(raw: dict[str, Any]) -> HealthThresholds:
    return HealthThresholds(
        warning=float(raw.get("warning", 1.5)),
        critical=float(raw.get("critical", 1.2)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate client configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    raw = _read_yaml(config_path)

    cfg = AppConfig(
        client=_build_client(raw.get("client") or {}),
        rpc=_build_rpc(raw.get("rpc") or {}),
        health=_build_health(raw.get("health") or {}),
        registry_path=_optional_str(raw.get("registry_path")),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.client.chain_id <= 0:
        raise ValueError(f"Invalid chain id {cfg.client.chain_id}")
    if cfg.health.critical >= cfg.health.warning:
        raise ValueError("health.critical must be lower than health.warning")
    if cfg.rpc.rpc_timeout <= 0:
        raise ValueError("rpc.timeout must be positive")
    if cfg.rpc.receipt_poll_interval <= 0 or cfg.rpc.receipt_timeout <= 0:
        raise ValueError("rpc receipt polling settings must be positive")


def resolve_rpc_endpoints(cfg: AppConfig, registry: NetworkMarketRegistry) -> ChainConfig:
    """Return the transport config, falling back to the registry's endpoints."""
    if cfg.rpc.rpc_endpoints:
        return cfg.rpc
    network = registry.get_network(cfg.client.chain_id)
    endpoints = network.rpc_endpoints if network else ()
    return ChainConfig(
        rpc_endpoints=endpoints,
        rpc_timeout=cfg.rpc.rpc_timeout,
        receipt_poll_interval=cfg.rpc.receipt_poll_interval,
        receipt_timeout=cfg.rpc.receipt_timeout,
    )
