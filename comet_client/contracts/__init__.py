"""Typed handles for the market's ledger, rewards and configurator contracts."""
from .abi import ContractFunction
from .base import ContractHandle, PendingTransaction
from .comet import CometContract
from .configurator import ConfiguratorContract
from .rewards import RewardsContract

__all__ = [
    "CometContract",
    "ConfiguratorContract",
    "ContractFunction",
    "ContractHandle",
    "PendingTransaction",
    "RewardsContract",
]
