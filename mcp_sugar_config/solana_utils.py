import base64
from typing import Optional

import httpx
from pydantic import BaseModel
from spl.token._layouts import ACCOUNT_LAYOUT, MINT_LAYOUT
from spl.token.constants import TOKEN_PROGRAM_ID

from mcp_sugar_config.config import RPC_ENDPOINT, RPC_TIMEOUT
from mcp_sugar_config.errors import NetworkError
from mcp.server.fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)

# Raw sizes of SPL Token program accounts
MINT_ACCOUNT_SIZE = MINT_LAYOUT.sizeof()
TOKEN_ACCOUNT_SIZE = ACCOUNT_LAYOUT.sizeof()


class AccountInfo(BaseModel):
    """The parts of an on-chain account the wizard cares about."""
    owner: str
    lamports: int
    data_len: int

    @property
    def is_token_program_owned(self) -> bool:
        return self.owner == str(TOKEN_PROGRAM_ID)

    @property
    def is_mint(self) -> bool:
        return self.is_token_program_owned and self.data_len == MINT_ACCOUNT_SIZE

    @property
    def is_token_account(self) -> bool:
        return self.is_token_program_owned and self.data_len == TOKEN_ACCOUNT_SIZE


class SolanaAccountResolver:
    """
    Looks up accounts on a Solana cluster over JSON-RPC.

    Used only by the address-existence validators. A missing account is a normal answer
    (``None``); an unreachable endpoint, an HTTP error or an RPC error raises NetworkError.
    Pass ``client`` to share an existing httpx.AsyncClient (the resolver then does not close it).
    """

    def __init__(
        self,
        rpc_endpoint: str = RPC_ENDPOINT,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = RPC_TIMEOUT,
    ):
        self.rpc_endpoint = rpc_endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)))

    async def __aenter__(self) -> "SolanaAccountResolver":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_account(self, address: str) -> Optional[AccountInfo]:
        """Fetch account info, or None when the account does not exist."""
        try:
            response = await self._client.post(
                self.rpc_endpoint,
                json={
                    "jsonrpc": "2.0",
                    "id": 1,
                    "method": "getAccountInfo",
                    "params": [address, {"encoding": "base64", "commitment": "confirmed"}],
                },
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Timed out fetching account {address} from {self.rpc_endpoint}: {e}")
            raise NetworkError(f"Timed out contacting {self.rpc_endpoint}")
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error fetching account {address}: {e.response.status_code} - {e.response.text}")
            raise NetworkError(f"HTTP error from RPC endpoint: {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Could not reach RPC endpoint {self.rpc_endpoint}: {e}")
            raise NetworkError(f"Could not reach RPC endpoint {self.rpc_endpoint}: {e}")
        except ValueError as e:
            raise NetworkError(f"RPC endpoint returned invalid JSON: {e}")

        if payload.get("error"):
            raise NetworkError(f"Error fetching account {address}: {payload['error']}")

        try:
            value = payload["result"]["value"]
            if value is None:
                logger.debug(f"Account {address} not found")
                return None
            data = base64.b64decode(value["data"][0])
            return AccountInfo(owner=value["owner"], lamports=value["lamports"], data_len=len(data))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Malformed getAccountInfo response for {address}: {e}")
            raise NetworkError(f"Malformed account data received: {e}")

    async def account_exists(self, address: str) -> bool:
        return await self.get_account(address) is not None
