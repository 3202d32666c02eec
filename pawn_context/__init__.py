"""
pawn-context - Compiler-backed symbol model for PAWN editor integrations.

Runs the PAWN compiler for workspaces and standalone files, keeps the
resulting symbols and diagnostics per parser context, and routes any file
path to the context that owns it.
"""

__version__ = "1.0.0"
__author__ = "pawn-context Team"

# Package imports for convenient access
from core.models.config import CompilerSettings, ClientCapabilities, WorkspaceFolder
from core.parser.context import ParserContext
from core.parser.registry import ParserRegistry

__all__ = [
    "CompilerSettings",
    "ClientCapabilities",
    "WorkspaceFolder",
    "ParserContext",
    "ParserRegistry",
    "__version__",
]
