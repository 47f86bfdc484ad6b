"""Integration tests for CometClient: handles, endpoint switches, generations."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from comet_client.chains.evm import EvmRpcClient
from comet_client.client import CometClient
from comet_client.config import AppConfig, NetworkMarketRegistry
from comet_client.contracts.comet import TOTAL_SUPPLY
from comet_client.errors import ContractUnavailable, MissingArgument, NotInitialized
from tests.helpers import (
    ACCOUNT,
    ASSET,
    CONFIGURATOR,
    LEDGER_A,
    LEDGER_B,
    REWARDS,
    TX_HASH,
    responder,
)


class TestFromConfig:
    def test_builds_transport_and_resolves(self, sample_app_config: AppConfig) -> None:
        client = CometClient.from_config(sample_app_config)
        assert isinstance(client.chain, EvmRpcClient)
        assert client.chain.endpoints[0] == "https://rpc1.example.com"
        assert client.state.active_market == "USDC"
        assert client.sender == ACCOUNT


class TestHandles:
    def test_handles_bound_to_current_addresses(self, client: CometClient) -> None:
        assert client.comet().address == LEDGER_A
        assert client.rewards().address == REWARDS
        assert client.configurator().address == CONFIGURATOR

    def test_handle_keeps_snapshot_after_switch(self, client: CometClient) -> None:
        comet = client.comet()
        client.switch_market("WETH")
        assert comet.address == LEDGER_A
        assert client.comet().address == LEDGER_B

    def test_uninitialized_client(self, chain: MagicMock, registry: NetworkMarketRegistry) -> None:
        client = CometClient(chain, registry, 999)
        assert not client.is_initialized
        with pytest.raises(NotInitialized):
            client.comet()

    def test_missing_rewards_contract(self, chain: MagicMock, registry: NetworkMarketRegistry) -> None:
        client = CometClient(chain, registry, 8453)
        with pytest.raises(ContractUnavailable):
            client.rewards()

    def test_malformed_override_surfaces_on_handle(self, client: CometClient) -> None:
        client.set_ledger_address("0xdeadbeef")
        with pytest.raises(ContractUnavailable, match="ledger address"):
            client.comet()


class TestGenerations:
    def test_switch_bumps_generation(self, client: CometClient) -> None:
        token = client.begin_request()
        assert client.is_current(token)
        client.switch_market("WETH")
        assert not client.is_current(token)

    def test_failed_switch_keeps_generation(self, client: CometClient) -> None:
        token = client.begin_request()
        assert client.switch_market("DOGE") is False
        assert client.is_current(token)

    def test_chain_switch_and_setters_bump(self, client: CometClient) -> None:
        start = client.generation
        client.switch_chain(8453)
        client.set_rewards_address(REWARDS)
        assert client.generation == start + 2


class TestContractCalls:
    @pytest.mark.asyncio
    async def test_read_goes_to_ledger(self, client: CometClient, chain: MagicMock) -> None:
        chain.call.side_effect = responder({TOTAL_SUPPLY: (10**12,)})
        assert await client.comet().total_supply() == 10**12
        assert chain.call.call_args.args[0] == LEDGER_A

    @pytest.mark.asyncio
    async def test_write_sends_from_sender(self, client: CometClient, chain: MagicMock) -> None:
        pending = await client.comet().supply(ASSET, 10**6)
        tx = chain.send_transaction.call_args.args[0]
        assert tx["from"] == ACCOUNT
        assert tx["to"] == LEDGER_A
        assert pending.hash == TX_HASH

        receipt = await pending.wait()
        assert receipt.succeeded
        assert receipt.block_number == 16

    @pytest.mark.asyncio
    async def test_write_without_sender(
        self, chain: MagicMock, registry: NetworkMarketRegistry
    ) -> None:
        client = CometClient(chain, registry, 1)
        with pytest.raises(MissingArgument, match="sender"):
            await client.comet().supply(ASSET, 1)
        chain.send_transaction.assert_not_awaited()
