"""
Sugar Config Package Initialization

This package provides an interactive configuration wizard for Metaplex Candy Machines on the
Solana blockchain. It walks an operator through the Candy Machine options, validates every
answer (including on-chain checks of SPL token accounts), and writes a complete, consistent
config file.

The package includes:
- Input primitives and the answer validation engine
- The ordered question flow with its optional feature sub-flows
- A write-once config assembler and frozen Pydantic config models
- Atomic config persistence with an overwrite-or-print decision
- A rich terminal front end and an MCP server implementation
"""
