"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from comet_client.client import CometClient
from comet_client.config import (
    AppConfig,
    ChainConfig,
    ClientConfig,
    HealthThresholds,
    NetworkMarketRegistry,
    build_registry,
)
from tests.helpers import ACCOUNT, REGISTRY_YAML, TX_HASH


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry_path(tmp_path: Path) -> Path:
    path = tmp_path / "networks.yaml"
    path.write_text(REGISTRY_YAML)
    return path


@pytest.fixture()
def registry() -> NetworkMarketRegistry:
    return build_registry(yaml.safe_load(REGISTRY_YAML))


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=(
            "https://rpc1.example.com",
            "https://rpc2.example.com",
            "https://rpc3.example.com",
        ),
        rpc_timeout=5,
        receipt_poll_interval=0.01,
        receipt_timeout=0.05,
    )


@pytest.fixture()
def sample_app_config(sample_chain_config: ChainConfig, registry_path: Path) -> AppConfig:
    return AppConfig(
        client=ClientConfig(chain_id=1, market="USDC", account=ACCOUNT),
        rpc=sample_chain_config,
        health=HealthThresholds(),
        registry_path=str(registry_path),
    )


@pytest.fixture()
def sample_yaml_path(tmp_path: Path, registry_path: Path) -> Path:
    content = textwrap.dedent(
        f"""\
        client:
          chain_id: 1
          market: WETH
          account: "{ACCOUNT.lower()}"
        rpc:
          endpoints: ["https://rpc.test.com"]
          timeout: 10
        health:
          warning: 1.6
          critical: 1.1
        registry_path: "{registry_path}"
        """
    )
    path = tmp_path / "config.yaml"
    path.write_text(content)
    return path


# ---------------------------------------------------------------------------
# Chain client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def chain() -> MagicMock:
    mock = MagicMock()
    mock.call = AsyncMock(return_value="0x")
    mock.send_transaction = AsyncMock(return_value=TX_HASH)
    mock.get_transaction_receipt = AsyncMock(return_value=None)
    mock.wait_for_receipt = AsyncMock(
        return_value={"transactionHash": TX_HASH, "blockNumber": "0x10", "status": "0x1"}
    )
    mock.get_chain_id = AsyncMock(return_value=1)
    return mock


@pytest.fixture()
def client(chain: MagicMock, registry: NetworkMarketRegistry) -> CometClient:
    return CometClient(chain, registry, 1, sender=ACCOUNT)
