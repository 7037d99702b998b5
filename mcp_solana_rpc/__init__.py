"""
MCP Solana RPC Package

This package exposes a handful of read-only Solana RPC queries as tools of an
MCP (Model Context Protocol) server running over stdio. It performs no writes
and keeps no chain state between calls; every tool invocation is answered with
a fresh query against the configured RPC endpoint.

Main components:
- server.py: FastMCP server, tool registry and stdio entry point
- rpc.py: RPC adapter around solana-py's AsyncClient and account snapshots
- keypairs.py: Secret key parsing strategies
- formatting.py: Text rendering of query results
- errors.py: Error kinds reported back to callers
"""

# MCP Solana RPC
