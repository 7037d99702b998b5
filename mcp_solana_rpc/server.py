import asyncio
import os
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Literal

from pydantic import Field
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.utilities.logging import get_logger
from dotenv import load_dotenv

from .errors import SolanaToolError
from .formatting import (
    format_account_info,
    format_account_not_found,
    format_balance,
    format_failure,
    format_keypair_info,
    format_slot,
)
from .rpc import SolanaRpc

# Load environment variables from .env file in the repository root
dotenv_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=dotenv_path)

RPC_ENDPOINT = os.getenv("RPC_ENDPOINT", "https://api.mainnet-beta.solana.com")
RPC_TIMEOUT = float(os.getenv("RPC_TIMEOUT", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logger = get_logger(__name__)

# --- Server Setup ---

@dataclass
class AppContext:
    rpc: SolanaRpc


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Opens the RPC connection shared by all tool calls for the server's lifetime."""
    logger.info(f"Connecting to Solana RPC endpoint {RPC_ENDPOINT} (commitment={Confirmed})")
    async with AsyncClient(RPC_ENDPOINT, commitment=Confirmed, timeout=RPC_TIMEOUT) as client:
        yield AppContext(rpc=SolanaRpc(client))
    logger.info("Solana RPC connection closed.")


mcp = FastMCP(name="solana-rpc", lifespan=app_lifespan, log_level=LOG_LEVEL)

# --- Helper Functions ---

def get_rpc(context: Context) -> SolanaRpc:
    return context.request_context.lifespan_context.rpc

# --- MCP Tools ---

@mcp.tool(name="getSlot", description="Get the current slot")
async def get_slot(context: Context) -> str:
    logger.info("Received getSlot request")
    try:
        slot = await get_rpc(context).get_slot()
        return format_slot(slot)
    except SolanaToolError as e:
        return format_failure("current slot", e)
    except Exception as e:
        logger.exception(f"Error retrieving current slot: {e}")
        return format_failure("current slot", e)


@mcp.tool(name="getBalance", description="Get balance for a Solana address")
async def get_balance(
    context: Context,
    address: str = Field(..., description="Solana account address"),
) -> str:
    logger.info(f"Received getBalance request for address={address}")
    try:
        lamports = await get_rpc(context).get_balance(address)
        logger.debug(f"Balance for {address}: {lamports} lamports")
        return format_balance(address, lamports)
    except SolanaToolError as e:
        return format_failure("balance for address", e)
    except Exception as e:
        logger.exception(f"Error retrieving balance for {address}: {e}")
        return format_failure("balance for address", e)


@mcp.tool(name="getKeypairInfo", description="Get information about a keypair from its secret key")
async def get_keypair_info(
    context: Context,
    secretKey: str = Field(..., description="Secret key as comma separated byte values or a JSON array of bytes"),  # noqa: N803
) -> str:
    # Never log the secret key itself
    logger.info("Received getKeypairInfo request")
    try:
        info = await get_rpc(context).get_keypair_info(secretKey)
        logger.debug(f"Keypair resolved to public key {info.pubkey}")
        return format_keypair_info(info)
    except SolanaToolError as e:
        return format_failure("keypair information", e)
    except Exception as e:
        logger.exception(f"Error retrieving keypair information: {e}")
        return format_failure("keypair information", e)


@mcp.tool(name="getAccountInfo", description="Get detailed account information for a Solana address")
async def get_account_info(
    context: Context,
    address: str = Field(..., description="Solana account address"),
    encoding: Literal["base58", "base64", "jsonParsed"] = Field("base64", description="Data encoding format"),
) -> str:
    # Called directly (not through FastMCP) the default is still the FieldInfo object
    if not isinstance(encoding, str):
        encoding = "base64"
    logger.info(f"Received getAccountInfo request for address={address}, encoding={encoding}")
    try:
        account = await get_rpc(context).get_account_info(address, encoding)
        if account is None:
            logger.debug(f"No account at {address}")
            return format_account_not_found(address)
        return format_account_info(address, account, encoding)
    except SolanaToolError as e:
        return format_failure("account information", e)
    except Exception as e:
        logger.exception(f"Error retrieving account information for {address}: {e}")
        return format_failure("account information", e)


def main() -> None:
    logger.info(f"Using RPC Endpoint: {RPC_ENDPOINT}")
    try:
        asyncio.run(mcp.run_stdio_async())
    except KeyboardInterrupt:
        logger.info("Solana MCP Server stopped.")
    except Exception as e:
        logger.exception(f"Fatal error in main(): {e}")
        sys.exit(1)


if __name__ == "__main__":
    # Example: python -m mcp_solana_rpc.server
    main()
