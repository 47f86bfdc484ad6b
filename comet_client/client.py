"""CometClient: endpoint state, transport and contract handles for one caller."""
from __future__ import annotations

import logging

from .chains.evm import EvmRpcClient
from .config import AppConfig, NetworkMarketRegistry, load_registry, resolve_rpc_endpoints
from .contracts import CometContract, ConfiguratorContract, RewardsContract
from .errors import ContractUnavailable
from .interfaces import ChainClient
from .resolver import ClientEndpointState, EndpointResolver, require_ledger

logger = logging.getLogger(__name__)


class CometClient:
    """Client bound to one chain client and one resolved market.

    Every endpoint change bumps ``generation``. Callers that await a read take
    a token with ``begin_request()`` and check ``is_current(token)`` before
    applying the response, so answers from a previous market are dropped.
    """

    def __init__(
        self,
        chain: ChainClient,
        registry: NetworkMarketRegistry,
        chain_id: int,
        *,
        market: str | None = None,
        ledger_address: str | None = None,
        rewards_address: str | None = None,
        configurator_address: str | None = None,
        sender: str | None = None,
    ) -> None:
        self.chain = chain
        self.sender = sender
        self._resolver = EndpointResolver(
            registry,
            chain_id,
            market=market,
            ledger_address=ledger_address,
            rewards_address=rewards_address,
            configurator_address=configurator_address,
        )
        self._generation = 0

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        registry: NetworkMarketRegistry | None = None,
        chain: ChainClient | None = None,
    ) -> CometClient:
        """Build a client (and an EVM JSON-RPC transport unless given one) from config."""
        if registry is None:
            registry = load_registry(config.registry_path)
        if chain is None:
            chain = EvmRpcClient(resolve_rpc_endpoints(config, registry))
        c = config.client
        return cls(
            chain,
            registry,
            c.chain_id,
            market=c.market,
            ledger_address=c.ledger_address,
            rewards_address=c.rewards_address,
            configurator_address=c.configurator_address,
            sender=c.account,
        )

    # ------------------------------------------------------------------
    # Endpoint state
    # ------------------------------------------------------------------

    @property
    def state(self) -> ClientEndpointState:
        return self._resolver.state

    @property
    def registry(self) -> NetworkMarketRegistry:
        return self._resolver.registry

    @property
    def is_initialized(self) -> bool:
        return self._resolver.is_initialized

    @property
    def generation(self) -> int:
        return self._generation

    def begin_request(self) -> int:
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def _bump(self) -> None:
        self._generation += 1

    def switch_market(self, market: str, *, reset_overrides: bool = False) -> bool:
        switched = self._resolver.switch_market(market, reset_overrides=reset_overrides)
        if switched:
            self._bump()
        return switched

    def switch_chain(
        self,
        chain_id: int,
        *,
        chain: ChainClient | None = None,
        ledger_address: str | None = None,
        rewards_address: str | None = None,
        configurator_address: str | None = None,
    ) -> ClientEndpointState:
        """Re-resolve for ``chain_id``; pass ``chain`` to swap the transport too."""
        if chain is not None:
            self.chain = chain
        state = self._resolver.switch_chain(
            chain_id,
            ledger_address=ledger_address,
            rewards_address=rewards_address,
            configurator_address=configurator_address,
        )
        self._bump()
        return state

    def set_ledger_address(self, address: str) -> None:
        self._resolver.set_ledger_address(address)
        self._bump()

    def set_rewards_address(self, address: str) -> None:
        self._resolver.set_rewards_address(address)
        self._bump()

    def set_configurator_address(self, address: str) -> None:
        self._resolver.set_configurator_address(address)
        self._bump()

    # ------------------------------------------------------------------
    # Contract handles (bound to the addresses current at call time)
    # ------------------------------------------------------------------

    def comet(self) -> CometContract:
        return CometContract(self.chain, require_ledger(self.state), self.sender)

    def rewards(self) -> RewardsContract:
        address = self.state.rewards_address
        if address is None:
            raise ContractUnavailable(f"No rewards contract for chain {self.state.chain_id}")
        return RewardsContract(self.chain, address, self.sender)

    def configurator(self) -> ConfiguratorContract:
        address = self.state.configurator_address
        if address is None:
            raise ContractUnavailable(
                f"No configurator contract for chain {self.state.chain_id}"
            )
        return ConfiguratorContract(self.chain, address, self.sender)
