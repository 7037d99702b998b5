"""Renders query results as the text returned by the MCP tools."""

import base64
import json

import base58

from .rpc import AccountEncoding, AccountSnapshot, KeypairSnapshot, lamports_to_sol


def format_slot(slot: int) -> str:
    return f"Current slot: {slot}"


def format_balance(address: str, lamports: int) -> str:
    return f"Balance for {address}:\n{lamports_to_sol(lamports)} SOL"


def format_keypair_info(info: KeypairSnapshot) -> str:
    account = info.account
    return (
        "Keypair Information:\n"
        f"Public Key: {info.pubkey}\n"
        f"Balance: {lamports_to_sol(info.lamports)} SOL\n"
        f"Account Program Owner: {account.owner if account else 'N/A'}\n"
        f"Account Size: {account.data_length if account else 0} bytes\n"
        f"Is Executable: {account.executable if account else False}\n"
        f"Rent Epoch: {account.rent_epoch if account else 0}"
    )


def encode_account_data(account: AccountSnapshot, encoding: AccountEncoding) -> tuple:
    """
    Returns ``(label, payload)`` for the account data in the requested encoding.

    A jsonParsed request the node could not parse is labelled as a base64
    fallback rather than passed off as parsed output.
    """
    if encoding == "base58":
        return "base58", base58.b58encode(account.data).decode("ascii")
    if encoding == "jsonParsed":
        if account.is_parsed:
            return f"jsonParsed, program {account.program}", json.dumps(account.parsed, indent=2)
        return "base64, jsonParsed unavailable", base64.b64encode(account.data).decode("ascii")
    return "base64", base64.b64encode(account.data).decode("ascii")


def format_account_info(address: str, account: AccountSnapshot, encoding: AccountEncoding = "base64") -> str:
    label, payload = encode_account_data(account, encoding)
    return (
        f"Account Information for {address}:\n"
        f"Lamports: {account.lamports} ({lamports_to_sol(account.lamports)} SOL)\n"
        f"Owner: {account.owner}\n"
        f"Executable: {account.executable}\n"
        f"Rent Epoch: {account.rent_epoch}\n"
        f"Data Length: {account.data_length} bytes\n"
        f"Data ({label}): {payload}"
    )


def format_account_not_found(address: str) -> str:
    return f"No account found for address: {address}"


def format_failure(action: str, error: Exception) -> str:
    """``action`` completes "Failed to retrieve ...", e.g. ``"current slot"``."""
    return f"Failed to retrieve {action}: {error}"
