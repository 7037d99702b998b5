"""
RPC adapter.

``SolanaRpc`` wraps an already constructed ``AsyncClient`` and issues the
read-only queries behind the MCP tools. Failures are raised as the error kinds
in ``errors.py``; a missing account is reported as ``None``.
"""

from typing import Any, Awaitable, Literal, Optional

import httpx
from pydantic import BaseModel
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import RPCException
from solders.pubkey import Pubkey
from solders.rpc.responses import GetAccountInfoResp, GetBalanceResp, GetSlotResp

from mcp.server.fastmcp.utilities.logging import get_logger

from .errors import InvalidAddressError, NetworkError, RpcError
from .keypairs import parse_keypair

LAMPORTS_PER_SOL = 1_000_000_000

AccountEncoding = Literal["base58", "base64", "jsonParsed"]

logger = get_logger(__name__)

# --- Data Structures ---

class AccountSnapshot(BaseModel):
    lamports: int
    owner: str # Pubkey string
    executable: bool
    rent_epoch: int
    data: bytes = b"" # Raw account bytes, empty when the node returned parsed JSON
    data_length: int
    program: Optional[str] = None # Set when the node parsed the account data
    parsed: Optional[Any] = None

    @property
    def is_parsed(self) -> bool:
        return self.program is not None


class KeypairSnapshot(BaseModel):
    pubkey: str
    lamports: int
    account: Optional[AccountSnapshot] = None


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


def parse_address(address: str) -> Pubkey:
    """Decodes a base58 public key, raising ``InvalidAddressError`` on bad input."""
    try:
        return Pubkey.from_string(address)
    except ValueError as e:
        raise InvalidAddressError(address) from e


def _snapshot_from_account(account: Any) -> AccountSnapshot:
    data = account.data
    fields = dict(
        lamports=account.lamports,
        owner=str(account.owner),
        executable=account.executable,
        rent_epoch=account.rent_epoch,
    )
    if isinstance(data, (bytes, bytearray)):
        return AccountSnapshot(data=bytes(data), data_length=len(data), **fields)
    # ParsedAccount from a jsonParsed request
    return AccountSnapshot(
        data_length=data.space,
        program=data.program,
        parsed=data.parsed,
        **fields,
    )


# --- Adapter ---

class SolanaRpc:
    """Read-only Solana queries over an injected ``AsyncClient``."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def _request(self, description: str, call: Awaitable[Any]) -> Any:
        logger.debug(f"RPC request: {description}")
        try:
            return await call
        except RPCException as e:
            logger.warning(f"RPC node returned an error for {description}: {e}")
            raise RpcError(str(e)) from e
        except (SolanaRpcException, httpx.HTTPError) as e:
            # SolanaRpcException wraps the transport error and its own message omits the cause
            cause = e.__cause__ or e
            logger.warning(f"RPC endpoint failure for {description}: {cause!r}")
            raise NetworkError(str(cause) or type(cause).__name__) from e
        except BaseException as e:
            # solders raises pyo3_runtime.PanicException (a BaseException) on malformed error bodies
            if type(e).__name__ != "PanicException":
                raise
            logger.warning(f"Malformed RPC response for {description}: {e}")
            raise RpcError(f"Malformed RPC response: {e}") from e

    async def get_slot(self) -> int:
        resp: GetSlotResp = await self._request("getSlot", self.client.get_slot())
        return resp.value

    async def get_balance(self, address: str) -> int:
        pubkey = parse_address(address)
        return await self._get_balance(pubkey)

    async def _get_balance(self, pubkey: Pubkey) -> int:
        resp: GetBalanceResp = await self._request(
            f"getBalance {pubkey}", self.client.get_balance(pubkey)
        )
        return resp.value

    async def get_account_info(
        self, address: str, encoding: AccountEncoding = "base64"
    ) -> Optional[AccountSnapshot]:
        """
        Fetches the account at ``address``.

        base58 and base64 both fetch the raw bytes (the node caps base58
        responses at 128 bytes, so encoding happens locally). jsonParsed asks
        the node to decode the data; accounts of programs the node has no
        parser for still come back as raw bytes.

        Returns:
            The account snapshot, or None when no account exists at the address.
        """
        pubkey = parse_address(address)
        if encoding != "jsonParsed":
            return await self._get_account(pubkey)
        resp = await self._request(
            f"getAccountInfo {pubkey} (jsonParsed)",
            self.client.get_account_info_json_parsed(pubkey),
        )
        return self._snapshot(resp)

    async def _get_account(self, pubkey: Pubkey) -> Optional[AccountSnapshot]:
        resp: GetAccountInfoResp = await self._request(
            f"getAccountInfo {pubkey}",
            self.client.get_account_info(pubkey, encoding="base64"),
        )
        return self._snapshot(resp)

    @staticmethod
    def _snapshot(resp: Any) -> Optional[AccountSnapshot]:
        if resp.value is None:
            return None
        return _snapshot_from_account(resp.value)

    async def get_keypair_info(self, secret_key: str) -> KeypairSnapshot:
        keypair = parse_keypair(secret_key)
        pubkey = keypair.pubkey()
        lamports = await self._get_balance(pubkey)
        account = await self._get_account(pubkey)
        return KeypairSnapshot(pubkey=str(pubkey), lamports=lamports, account=account)
