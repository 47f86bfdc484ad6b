"""Integration tests for the EVM JSON-RPC client: fallback and error handling."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from comet_client.chains.evm.client import EvmRpcClient, RpcError
from comet_client.config import ChainConfig

SESSION = "comet_client.chains.evm.client.aiohttp.ClientSession"
CONNECTOR = "comet_client.chains.evm.client.aiohttp.TCPConnector"


@pytest.fixture()
def client(sample_chain_config: ChainConfig) -> EvmRpcClient:
    return EvmRpcClient(sample_chain_config)


def _response(data: dict) -> AsyncMock:
    response = AsyncMock()
    response.json = AsyncMock(return_value=data)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def _mock_session(*outcomes: dict | Exception) -> AsyncMock:
    """Session whose successive ``post`` calls return/raise ``outcomes`` in order."""
    effects = [o if isinstance(o, Exception) else _response(o) for o in outcomes]

    session = AsyncMock()
    session.post = MagicMock(side_effect=effects)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


class TestRpcCall:
    @pytest.mark.asyncio
    async def test_successful_call(self, client: EvmRpcClient) -> None:
        session = _mock_session({"jsonrpc": "2.0", "id": 1, "result": "0x01"})

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            result = await client.rpc_call("eth_blockNumber", [])

        assert result == "0x01"
        payload = session.post.call_args.kwargs["json"]
        assert payload["method"] == "eth_blockNumber"
        assert payload["jsonrpc"] == "2.0"

    @pytest.mark.asyncio
    async def test_fallback_on_connection_error(self, client: EvmRpcClient) -> None:
        session = _mock_session(
            ConnectionError("first endpoint down"), {"jsonrpc": "2.0", "result": "0x02"}
        )

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            result = await client.rpc_call("eth_blockNumber", [])

        assert result == "0x02"
        assert client.current_rpc_index == 1
        assert session.post.call_args.args[0] == "https://rpc2.example.com"

    @pytest.mark.asyncio
    async def test_sticky_endpoint_after_switch(self, client: EvmRpcClient) -> None:
        session = _mock_session(
            ConnectionError("down"),
            {"jsonrpc": "2.0", "result": "0x1"},
            {"jsonrpc": "2.0", "result": "0x2"},
        )

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            await client.rpc_call("eth_blockNumber", [])
            await client.rpc_call("eth_blockNumber", [])

        assert session.post.call_args.args[0] == "https://rpc2.example.com"

    @pytest.mark.asyncio
    async def test_all_endpoints_fail(self, client: EvmRpcClient) -> None:
        session = _mock_session(*(ConnectionError("down") for _ in range(3)))

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            with pytest.raises(RuntimeError, match="All RPC endpoints failed"):
                await client.rpc_call("eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_rpc_error_message_passed_through(self, client: EvmRpcClient) -> None:
        session = _mock_session(
            {"jsonrpc": "2.0", "error": {"code": 3, "message": "execution reverted"}}
        )

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            with pytest.raises(RpcError, match="^execution reverted$"):
                await client.rpc_call("eth_call", [])

        assert session.post.call_count == 1

    @pytest.mark.asyncio
    async def test_no_endpoints(self) -> None:
        with pytest.raises(RuntimeError, match="No RPC endpoints"):
            await EvmRpcClient(ChainConfig()).rpc_call("eth_chainId", [])


class TestChainClientMethods:
    @pytest.mark.asyncio
    async def test_call(self, client: EvmRpcClient) -> None:
        session = _mock_session({"jsonrpc": "2.0", "result": "0x" + "00" * 31 + "05"})

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            result = await client.call("0xabc", "0x18160ddd")

        assert result.endswith("05")
        params = session.post.call_args.kwargs["json"]["params"]
        assert params == [{"to": "0xabc", "data": "0x18160ddd"}, "latest"]

    @pytest.mark.asyncio
    async def test_chain_id(self, client: EvmRpcClient) -> None:
        session = _mock_session({"jsonrpc": "2.0", "result": "0x2105"})

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            assert await client.get_chain_id() == 8453

    @pytest.mark.asyncio
    async def test_send_transaction_does_not_fall_back(self, client: EvmRpcClient) -> None:
        session = _mock_session(ConnectionError("down"), {"jsonrpc": "2.0", "result": "0xhash"})

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            with pytest.raises(ConnectionError):
                await client.send_transaction({"from": "0x1", "to": "0x2", "data": "0x"})

        assert session.post.call_count == 1

    @pytest.mark.asyncio
    async def test_wait_for_receipt_polls(self, client: EvmRpcClient) -> None:
        receipt = {"transactionHash": "0xhash", "blockNumber": "0x10", "status": "0x1"}
        session = _mock_session(
            {"jsonrpc": "2.0", "result": None}, {"jsonrpc": "2.0", "result": receipt}
        )

        with patch(SESSION, return_value=session), patch(CONNECTOR):
            assert await client.wait_for_receipt("0xhash") == receipt

        assert session.post.call_count == 2

    @pytest.mark.asyncio
    async def test_wait_for_receipt_times_out(self, client: EvmRpcClient) -> None:
        client.get_transaction_receipt = AsyncMock(return_value=None)  # type: ignore[method-assign]

        with pytest.raises(TimeoutError, match="No receipt"):
            await client.wait_for_receipt("0xhash")
