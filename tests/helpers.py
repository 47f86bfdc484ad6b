"""Addresses, registry YAML and eth_call fakes shared by the tests."""
from __future__ import annotations

import textwrap
from typing import Any, Callable

from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, to_checksum_address

from comet_client.contracts.abi import ContractFunction

LEDGER_A = to_checksum_address("0x" + "a1" * 20)
LEDGER_B = to_checksum_address("0x" + "b2" * 20)
LEDGER_BASE = to_checksum_address("0x" + "c3" * 20)
REWARDS = to_checksum_address("0x" + "d4" * 20)
CONFIGURATOR = to_checksum_address("0x" + "e5" * 20)
ACCOUNT = to_checksum_address("0x" + "12" * 20)
OTHER = to_checksum_address("0x" + "34" * 20)
ASSET = to_checksum_address("0x" + "56" * 20)
PRICE_FEED = to_checksum_address("0x" + "78" * 20)
BASE_FEED = to_checksum_address("0x" + "9a" * 20)
TX_HASH = "0x" + "ab" * 32

REGISTRY_YAML = textwrap.dedent(
    f"""\
    networks:
      1:
        name: Testnet One
        rpc_endpoints: ["https://rpc1.example.com", "https://rpc2.example.com"]
        block_explorer_url: "https://explorer.example.com"
        native_currency: {{name: Ether, symbol: ETH, decimals: 18}}
        markets:
          - name: USDC
            ledger: "{LEDGER_A.lower()}"
            rewards: "{REWARDS.lower()}"
            configurator: "{CONFIGURATOR.lower()}"
            base_asset: USDC
          - name: WETH
            ledger: "{LEDGER_B.lower()}"
            rewards: "{REWARDS.lower()}"
            configurator: "{CONFIGURATOR.lower()}"
            base_asset: WETH
      8453:
        name: Testnet Base
        rpc_endpoints: ["https://base.example.com"]
        markets:
          - name: USDbC
            ledger: "{LEDGER_BASE.lower()}"
            base_asset: USDbC
    """
)


def encode_result(fn: ContractFunction, *values: Any) -> str:
    """ABI-encode ``values`` as the return data of ``fn``."""
    return encode_hex(encode(list(fn.outputs), list(values)))


def responder(responses: dict[ContractFunction, Any]) -> Callable:
    """Build an ``eth_call`` side effect answering by function selector.

    Values are tuples of return values, an exception to raise, or a callable
    taking the calldata and returning such a tuple.
    """
    by_selector = {encode_hex(fn.selector): (fn, value) for fn, value in responses.items()}

    async def call(to: str, data: str, block: str = "latest") -> str:
        fn, value = by_selector[data[:10]]
        if callable(value) and not isinstance(value, BaseException):
            value = value(data)
        if isinstance(value, BaseException):
            raise value
        return encode_result(fn, *value)

    return call


def call_args(fn: ContractFunction, data: str) -> tuple:
    """Decode the arguments of an ``eth_call`` made to ``fn``."""
    return decode(list(fn.inputs), decode_hex(data)[4:])
