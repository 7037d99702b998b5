"""Error kinds raised by the RPC adapter and reported back as tool text."""


class SolanaToolError(Exception):
    """Base class for failures a tool handler turns into a text response."""


class RpcError(SolanaToolError):
    """The RPC node answered the request with a JSON-RPC error."""


class NetworkError(RpcError):
    """The RPC endpoint could not be reached or returned a non-2xx status."""


class InvalidAddressError(SolanaToolError, ValueError):
    """A string did not decode to a 32-byte base58 public key."""

    def __init__(self, address: str):
        super().__init__(f"Invalid public key input: {address!r}")
        self.address = address


class InvalidKeypairError(SolanaToolError, ValueError):
    """A secret key string matched none of the supported encodings."""
