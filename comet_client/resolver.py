"""Endpoint resolution: which ledger, rewards and configurator a client talks to."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from eth_utils import is_address, to_checksum_address

from .config import MarketConfig, NetworkMarketRegistry
from .errors import ContractUnavailable, NotInitialized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointOverrides:
    """Addresses set explicitly by the caller; they beat market defaults."""

    ledger_address: str | None = None
    rewards_address: str | None = None
    configurator_address: str | None = None


@dataclass(frozen=True)
class ClientEndpointState:
    chain_id: int
    active_market: str | None = None
    ledger_address: str | None = None
    rewards_address: str | None = None
    configurator_address: str | None = None

    @property
    def is_initialized(self) -> bool:
        return self.ledger_address is not None


def normalize_address(address: str, label: str = "address") -> str:
    """Checksum an address, raising ContractUnavailable when malformed."""
    if not address or not is_address(address):
        raise ContractUnavailable(f"Invalid {label}: {address!r}")
    return to_checksum_address(address)


def _clean_override(address: str | None) -> str | None:
    # Malformed overrides are kept verbatim and rejected when a handle is built
    if address is None:
        return None
    address = address.strip()
    if not address:
        return None
    return to_checksum_address(address) if is_address(address) else address


def _pick_market(
    registry: NetworkMarketRegistry, chain_id: int, market: str | None
) -> MarketConfig | None:
    selected = registry.get_market(chain_id, market)
    if selected is None:
        selected = registry.first_market(chain_id)
    return selected


def resolve_endpoints(
    registry: NetworkMarketRegistry,
    chain_id: int,
    market: str | None = None,
    overrides: EndpointOverrides = EndpointOverrides(),
) -> ClientEndpointState:
    """Resolve addresses for a chain, optional market and explicit overrides.

    1. An explicit ledger address wins outright.
    2. Otherwise a registered ``market`` supplies the addresses.
    3. Otherwise the first market registered for the chain is used.
    4. An unknown chain without an explicit ledger yields no ledger address.

    Rewards/configurator overrides win independently of the market. Never
    raises for an unknown chain or market.
    """
    if overrides.ledger_address is not None:
        # Explicit ledger: only a named, registered market contributes defaults
        selected = registry.get_market(chain_id, market)
    else:
        selected = _pick_market(registry, chain_id, market)

    state = ClientEndpointState(chain_id=chain_id)
    if selected is not None:
        state = ClientEndpointState(
            chain_id=chain_id,
            active_market=selected.name,
            ledger_address=selected.ledger_address,
            rewards_address=selected.rewards_address,
            configurator_address=selected.configurator_address,
        )

    if overrides.ledger_address is not None:
        state = replace(state, ledger_address=overrides.ledger_address)
    if overrides.rewards_address is not None:
        state = replace(state, rewards_address=overrides.rewards_address)
    if overrides.configurator_address is not None:
        state = replace(state, configurator_address=overrides.configurator_address)
    return state


def require_ledger(state: ClientEndpointState) -> str:
    if state.ledger_address is None:
        raise NotInitialized()
    return state.ledger_address


class EndpointResolver:
    """Owns the endpoint state of one client instance.

    State is replaced wholesale on every change, so a snapshot taken before an
    await never changes underneath the caller.
    """

    def __init__(
        self,
        registry: NetworkMarketRegistry,
        chain_id: int,
        market: str | None = None,
        ledger_address: str | None = None,
        rewards_address: str | None = None,
        configurator_address: str | None = None,
    ) -> None:
        self._registry = registry
        self._overrides = _build_overrides(ledger_address, rewards_address, configurator_address)
        self._state = resolve_endpoints(registry, chain_id, market, self._overrides)
        self._log_state("Resolved endpoints")

    @property
    def registry(self) -> NetworkMarketRegistry:
        return self._registry

    @property
    def state(self) -> ClientEndpointState:
        return self._state

    @property
    def overrides(self) -> EndpointOverrides:
        return self._overrides

    @property
    def is_initialized(self) -> bool:
        return self._state.is_initialized

    def _log_state(self, prefix: str) -> None:
        s = self._state
        logger.info(
            "%s: chain=%s market=%s ledger=%s", prefix, s.chain_id, s.active_market, s.ledger_address
        )
        if not s.is_initialized:
            logger.warning("No ledger address for chain %s; client is uninitialized", s.chain_id)

    # ------------------------------------------------------------------
    # Switching
    # ------------------------------------------------------------------

    def switch_market(self, market: str, *, reset_overrides: bool = False) -> bool:
        """Select another registered market on the current chain.

        Returns False (state unchanged) when the market is not registered.
        Overrides stay in force unless ``reset_overrides`` is set.
        """
        chain_id = self._state.chain_id
        if self._registry.get_market(chain_id, market) is None:
            logger.debug("Market %s not registered on chain %s", market, chain_id)
            return False
        if reset_overrides:
            self._overrides = EndpointOverrides()
        self._state = resolve_endpoints(self._registry, chain_id, market, self._overrides)
        self._log_state("Switched market")
        return True

    def switch_chain(
        self,
        chain_id: int,
        *,
        ledger_address: str | None = None,
        rewards_address: str | None = None,
        configurator_address: str | None = None,
    ) -> ClientEndpointState:
        """Re-resolve everything for another chain.

        Previous overrides are dropped; only those passed here apply. The
        current market name is kept as a preference and falls back to the
        chain's first market when it does not exist there.
        """
        preferred = self._state.active_market
        self._overrides = _build_overrides(ledger_address, rewards_address, configurator_address)
        self._state = resolve_endpoints(self._registry, chain_id, preferred, self._overrides)
        self._log_state("Switched chain")
        return self._state

    # ------------------------------------------------------------------
    # Explicit overrides
    # ------------------------------------------------------------------

    def set_ledger_address(self, address: str) -> None:
        cleaned = _clean_override(address)
        self._overrides = replace(self._overrides, ledger_address=cleaned)
        self._state = replace(self._state, ledger_address=cleaned)

    def set_rewards_address(self, address: str) -> None:
        cleaned = _clean_override(address)
        self._overrides = replace(self._overrides, rewards_address=cleaned)
        self._state = replace(self._state, rewards_address=cleaned)

    def set_configurator_address(self, address: str) -> None:
        cleaned = _clean_override(address)
        self._overrides = replace(self._overrides, configurator_address=cleaned)
        self._state = replace(self._state, configurator_address=cleaned)


def _build_overrides(
    ledger_address: str | None,
    rewards_address: str | None,
    configurator_address: str | None,
) -> EndpointOverrides:
    return EndpointOverrides(
        ledger_address=_clean_override(ledger_address),
        rewards_address=_clean_override(rewards_address),
        configurator_address=_clean_override(configurator_address),
    )
