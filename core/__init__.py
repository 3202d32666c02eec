"""
pawn-context core package

Compiler-backed symbol model for PAWN editor integrations.
"""

__version__ = "1.0.0"
__author__ = "pawn-context Team"

from .models import CompilerSettings, ClientCapabilities, WorkspaceFolder, Diagnostic, FunctionSymbol

__all__ = [
    "CompilerSettings",
    "ClientCapabilities",
    "WorkspaceFolder",
    "Diagnostic",
    "FunctionSymbol"
]
