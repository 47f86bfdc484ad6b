"""Unit tests for ABI function descriptions and contract struct decoding."""
from __future__ import annotations

from decimal import Decimal

import pytest
from eth_abi import decode, encode
from eth_utils import decode_hex

from comet_client.contracts.abi import ContractFunction
from comet_client.contracts.comet import GET_ASSET_INFO, GET_SUPPLY_RATE, SUPPLY
from comet_client.contracts.configurator import GET_CONFIGURATION, parse_configuration
from comet_client.numeric import WAD
from tests.helpers import ASSET, LEDGER_A, PRICE_FEED, encode_result


class TestContractFunction:
    def test_known_selectors(self) -> None:
        # ERC-20 style selectors are well known
        assert ContractFunction("balanceOf", ("address",)).selector.hex() == "70a08231"
        assert ContractFunction("totalSupply").selector.hex() == "18160ddd"

    def test_signature(self) -> None:
        assert SUPPLY.signature == "supply(address,uint256)"
        assert GET_ASSET_INFO.signature == "getAssetInfo(uint8)"

    def test_encode_call(self) -> None:
        data = SUPPLY.encode_call(ASSET, 10**6)
        raw = decode_hex(data)
        assert raw[:4] == SUPPLY.selector
        asset, amount = decode(["address", "uint256"], raw[4:])
        assert asset.lower() == ASSET.lower()
        assert amount == 10**6

    def test_wrong_argument_count(self) -> None:
        with pytest.raises(TypeError, match="takes 2 arguments"):
            SUPPLY.encode_call(ASSET)

    def test_single_output_unwrapped(self) -> None:
        data = encode_result(GET_SUPPLY_RATE, 1234)
        assert GET_SUPPLY_RATE.decode_output(data) == 1234

    def test_multiple_outputs_tuple(self) -> None:
        fn = ContractFunction("pair", (), ("uint128", "uint128"))
        data = "0x" + encode(["uint128", "uint128"], [1, 2]).hex()
        assert fn.decode_output(data) == (1, 2)

    def test_short_return_data_raises(self) -> None:
        with pytest.raises(Exception):
            GET_SUPPLY_RATE.decode_output("0x")


class TestConfigurationDecoding:
    def test_parse_configuration(self) -> None:
        asset_config = (ASSET, PRICE_FEED, 18, 8 * 10**17, 85 * 10**16, 95 * 10**16, 10**24)
        raw = (
            LEDGER_A, LEDGER_A, ASSET, PRICE_FEED, LEDGER_A,
            8 * 10**17, 10**16, 2 * 10**17, 0,
            8 * 10**17, 3 * 10**16, 4 * 10**17, 10**16,
            6 * 10**17, 10**15, 10, 20,
            10**6, 100 * 10**6, 5 * 10**12,
            [asset_config],
        )
        data = encode_result(GET_CONFIGURATION, raw)
        config = parse_configuration(GET_CONFIGURATION.decode_output(data))

        assert config.base_token == ASSET
        assert config.supply_kink.raw == 8 * 10**17
        assert config.supply_kink.scale == WAD
        assert config.borrow_per_year_interest_rate_base.raw == 10**16
        assert config.target_reserves == 5 * 10**12
        assert len(config.asset_configs) == 1
        assert config.asset_configs[0].asset == ASSET
        assert config.asset_configs[0].decimals == 18
        assert config.asset_configs[0].borrow_collateral_factor.to_decimal() == Decimal("0.8")
