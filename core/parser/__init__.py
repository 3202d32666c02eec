"""
Parser context lifecycle and workspace routing.

This module drives the external PAWN compiler and turns its structured
output into per-context symbol tables, and decides which context owns any
given file path.

Key Components:
- CompilerOracle: asyncio subprocess adapter for pawncc
- ResultDemultiplexer: decodes output records and replaces the sinks
- ParserContext: one invocation lifecycle per workspace or standalone file
- ParserRegistry: path to context routing and garbage collection

Example:
    from core.parser import ParserRegistry
    from core.models import CompilerSettings, WorkspaceFolder

    registry = ParserRegistry(settings=CompilerSettings(path=Path("/opt/pawncc")))
    registry.init([WorkspaceFolder.from_path("/home/me/gamemode")])
    context = await registry.ensure_parsed("/home/me/gamemode/utils.inc")
    print(f"Found {len(context.symbols.functions)} functions")
"""

from .oracle import CompilerOracle, OracleProtocol, OracleUnavailableError
from .demux import ResultDemultiplexer, RecordDecodeError, decode_record
from .context import ParserContext
from .registry import ParserRegistry

__all__ = [
    "CompilerOracle",
    "OracleProtocol",
    "OracleUnavailableError",
    "ResultDemultiplexer",
    "RecordDecodeError",
    "decode_record",
    "ParserContext",
    "ParserRegistry"
]
