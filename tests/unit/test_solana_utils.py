import base64
import json

import httpx
import pytest
from spl.token.constants import TOKEN_PROGRAM_ID

from mcp_sugar_config.errors import NetworkError
from mcp_sugar_config.solana_utils import MINT_ACCOUNT_SIZE, TOKEN_ACCOUNT_SIZE, SolanaAccountResolver

RPC_URL = "http://rpc.test"


def _account_value(size: int, owner: str = str(TOKEN_PROGRAM_ID)) -> dict:
    return {
        "data": [base64.b64encode(bytes(size)).decode(), "base64"],
        "executable": False,
        "lamports": 1_461_600,
        "owner": owner,
        "rentEpoch": 0,
    }


def _resolver(handler) -> SolanaAccountResolver:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SolanaAccountResolver(rpc_endpoint=RPC_URL, client=client)


def _rpc_result(value) -> dict:
    return {"jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": value}}


@pytest.mark.asyncio
async def test_get_account_mint(new_address):
    address = new_address()
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(200, json=_rpc_result(_account_value(MINT_ACCOUNT_SIZE)))

    account = await _resolver(handler).get_account(address)

    assert account.data_len == MINT_ACCOUNT_SIZE
    assert account.is_mint
    assert not account.is_token_account
    assert requests[0]["method"] == "getAccountInfo"
    assert requests[0]["params"][0] == address
    assert requests[0]["params"][1]["encoding"] == "base64"


@pytest.mark.asyncio
async def test_get_account_foreign_owner_is_not_token_account(new_address):
    def handler(request):
        return httpx.Response(200, json=_rpc_result(_account_value(TOKEN_ACCOUNT_SIZE, owner=new_address())))

    account = await _resolver(handler).get_account(new_address())
    assert not account.is_token_program_owned
    assert not account.is_token_account


@pytest.mark.asyncio
async def test_missing_account_returns_none(new_address):
    resolver = _resolver(lambda request: httpx.Response(200, json=_rpc_result(None)))
    assert await resolver.get_account(new_address()) is None
    assert await resolver.account_exists(new_address()) is False


@pytest.mark.asyncio
async def test_rpc_error_raises_network_error(new_address):
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32005, "message": "busy"}})

    with pytest.raises(NetworkError, match="busy"):
        await _resolver(handler).get_account(new_address())


@pytest.mark.asyncio
async def test_http_error_raises_network_error(new_address):
    with pytest.raises(NetworkError, match="500"):
        await _resolver(lambda request: httpx.Response(500, text="oops")).get_account(new_address())


@pytest.mark.asyncio
async def test_invalid_json_raises_network_error(new_address):
    with pytest.raises(NetworkError, match="invalid JSON"):
        await _resolver(lambda request: httpx.Response(200, text="<html>")).get_account(new_address())


@pytest.mark.asyncio
async def test_malformed_payload_raises_network_error(new_address):
    def handler(request):
        return httpx.Response(200, json=_rpc_result({"owner": "x"}))

    with pytest.raises(NetworkError, match="Malformed"):
        await _resolver(handler).get_account(new_address())


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [httpx.ConnectTimeout, httpx.ConnectError])
async def test_unreachable_endpoint_raises_network_error(new_address, error):
    def handler(request):
        raise error("unreachable", request=request)

    with pytest.raises(NetworkError):
        await _resolver(handler).get_account(new_address())


@pytest.mark.asyncio
async def test_shared_client_is_not_closed():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    async with SolanaAccountResolver(rpc_endpoint=RPC_URL, client=client):
        pass
    assert not client.is_closed
    await client.aclose()
