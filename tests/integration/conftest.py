import importlib # Needed for reloading
import sys
import types
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Generator, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from pytest import MonkeyPatch
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.account import Account
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.rpc.responses import GetAccountInfoResp, GetBalanceResp, GetSlotResp

# Ensure the server module can be imported
ROOT_DIR = Path(__file__).parent.parent.parent
sys.path.insert(0, str(ROOT_DIR))

import mcp_solana_rpc.server as server_module
from mcp_solana_rpc.rpc import SolanaRpc

# --- Mock response structures helpers ---

def create_mock_slot_resp(slot: int) -> MagicMock:
    mock_resp = MagicMock(spec=GetSlotResp)
    mock_resp.value = slot
    return mock_resp

def create_mock_balance_resp(lamports: int) -> MagicMock:
    mock_resp = MagicMock(spec=GetBalanceResp)
    mock_resp.value = lamports
    return mock_resp

def create_mock_account_info_resp(account: Optional[Account]) -> MagicMock:
    mock_resp = MagicMock(spec=GetAccountInfoResp)
    mock_resp.value = account
    return mock_resp

def create_account(
    lamports: int = 2_039_280,
    data: bytes = bytes(range(16)),
    owner: Optional[Pubkey] = None,
    executable: bool = False,
    rent_epoch: int = 361,
) -> Account:
    return Account(
        lamports=lamports,
        data=data,
        owner=owner or Pubkey.default(),
        executable=executable,
        rent_epoch=rent_epoch,
    )

def create_transport_error(cause: Exception, request: Any) -> SolanaRpcException:
    """Builds the SolanaRpcException solana-py raises from a failed HTTP request."""
    error = SolanaRpcException(cause, None, None, request)
    error.__cause__ = cause
    return error

# --- Mock client / context fixtures ---

@pytest.fixture(scope="function")
def mock_client() -> AsyncMock:
    """Stands in for solana.rpc.async_api.AsyncClient."""
    return AsyncMock()

@pytest.fixture(scope="function")
def mock_context(mock_client: AsyncMock) -> MagicMock:
    """Provides a mock MCP Context whose lifespan context carries a SolanaRpc over the mock client."""
    context = MagicMock()
    context.request_context.lifespan_context = server_module.AppContext(rpc=SolanaRpc(mock_client))
    return context

@pytest.fixture(scope="function")
def keypair() -> Keypair:
    return Keypair()

@pytest.fixture(scope="function")
def address() -> str:
    return str(Keypair().pubkey())

# --- Patched Server Module Fixture ---

@pytest.fixture(scope="function")
def patched_server_module(monkeypatch: MonkeyPatch) -> Generator[types.ModuleType, None, None]:
    """
    Sets RPC configuration through the environment and provides the reloaded
    server module. The module is reloaded again with the original environment
    afterwards so later tests see the defaults.
    """
    monkeypatch.setenv("RPC_ENDPOINT", "http://localhost:8899")
    monkeypatch.setenv("RPC_TIMEOUT", "2.5")
    try:
        reloaded_server = importlib.reload(server_module)
    except Exception as e:
        pytest.fail(f"Failed to reload mcp_solana_rpc.server: {e}")

    yield reloaded_server

    monkeypatch.undo()
    importlib.reload(server_module)

# --- Real client over a mock HTTP transport ---

@pytest_asyncio.fixture(scope="function")
async def connect_rpc() -> AsyncGenerator[Callable, None]:
    """
    Provides ``await connect(handler)``, returning a SolanaRpc over a real solana-py
    AsyncClient whose HTTP session answers every request with ``handler(http, request)``.
    ``http`` is the HTTP library solana-py was built on (httpx, or its httpx2
    fork in newer releases), so handlers raise and return that library's types.
    """
    clients: List[AsyncClient] = []

    async def connect(handler: Callable[[types.ModuleType, Any], Any]) -> SolanaRpc:
        client = AsyncClient("http://localhost:8899", commitment=Confirmed)
        original_session = client._provider.session
        http = importlib.import_module(type(original_session).__module__.split(".")[0])
        await original_session.aclose()
        client._provider.session = http.AsyncClient(
            transport=http.MockTransport(lambda request: handler(http, request))
        )
        clients.append(client)
        return SolanaRpc(client)

    yield connect

    for client in clients:
        await client.close()
