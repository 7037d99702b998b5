"""
Secret key parsing.

A secret key arrives as text in one of two shapes: comma separated decimal
byte values (``"12, 250, 7, ..."``) or a JSON array (``"[12,250,7,...]"``).
Each shape has its own parser strategy; strategies return ``None`` when the
text is not in their shape and are tried in the order of ``KEYPAIR_PARSERS``.
"""

import json
from typing import Callable, List, Optional, Sequence

from solders.keypair import Keypair

from mcp.server.fastmcp.utilities.logging import get_logger

from .errors import InvalidKeypairError

SECRET_KEY_LENGTH = 64

logger = get_logger(__name__)

KeypairParser = Callable[[str], Optional[Keypair]]


def _keypair_from_ints(values: Sequence[int]) -> Optional[Keypair]:
    if len(values) != SECRET_KEY_LENGTH:
        return None
    if any(not 0 <= v <= 255 for v in values):
        return None
    try:
        return Keypair.from_bytes(bytes(values))
    except ValueError as e:
        # solders rejects byte strings whose public half does not match the secret half
        logger.debug(f"Keypair.from_bytes rejected secret key bytes: {e}")
        return None


def parse_comma_separated(secret_key: str) -> Optional[Keypair]:
    """Parses ``"1, 2, 3, ..."``: every item must be a plain decimal integer."""
    items = [item.strip() for item in secret_key.split(",")]
    if not all(item.isdecimal() for item in items):
        return None
    return _keypair_from_ints([int(item) for item in items])


def parse_json_array(secret_key: str) -> Optional[Keypair]:
    """Parses a JSON array of integers such as a ``solana-keygen`` keyfile."""
    try:
        values = json.loads(secret_key)
    except json.JSONDecodeError:
        return None
    if not isinstance(values, list):
        return None
    # bool is an int subclass; true/false are not byte values
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return None
    return _keypair_from_ints(values)


KEYPAIR_PARSERS: List[KeypairParser] = [
    parse_comma_separated,
    parse_json_array,
]


def parse_keypair(secret_key: str, parsers: Sequence[KeypairParser] = KEYPAIR_PARSERS) -> Keypair:
    """
    Returns the keypair encoded by ``secret_key``.

    Raises:
        InvalidKeypairError: none of the parsers accepted the input.
    """
    for parser in parsers:
        keypair = parser(secret_key)
        if keypair is not None:
            logger.debug(f"Secret key parsed by {parser.__name__}")
            return keypair
    raise InvalidKeypairError(
        f"Secret key must be {SECRET_KEY_LENGTH} bytes given as comma separated "
        "decimal values or as a JSON array"
    )
